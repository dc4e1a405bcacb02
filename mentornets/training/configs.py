"""Configuration of a mentor: learning rate, scheduling, criteria and logging."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Sequence

from ..errors import ConfigurationError


def _number(value: Any, kind: type, name: str) -> Any:
    """Convert a config value to ``int`` or ``float`` or raise ConfigurationError."""

    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    if kind is int and isinstance(value, float) and not value.is_integer():
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    try:
        return kind(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from exc


class Scheduling(str, Enum):
    """Order in which samples are presented within an epoch."""

    SEQUENTIAL = "sequential"
    RANDOM = "random"

    @classmethod
    def from_name(cls, name: "str | Scheduling") -> "Scheduling":
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower()
        if key in {"iterative", "ordered"}:
            key = "sequential"
        if key in {"shuffle", "random_shuffle", "random-shuffle", "stochastic"}:
            key = "random"
        try:
            return cls(key)
        except ValueError as exc:
            raise ConfigurationError(f"Unknown scheduling policy: {name!r}") from exc


class StopReason(str, Enum):
    CONVERGED = "converged"
    MAX_EPOCHS = "max_epochs"
    TIMEOUT = "timeout"
    DIVERGED = "diverged"


@dataclass(frozen=True)
class LearningRate:
    """Learning rate schedule.

    ``policy="fixed"`` keeps ``initial`` forever.  ``policy="linear"`` decays
    linearly from ``initial`` to ``final`` over ``decay_epochs`` epochs and
    stays at ``final`` afterwards; ``final`` defaults to a tenth of
    ``initial``.
    """

    initial: float
    policy: str = "fixed"
    final: float | None = None
    decay_epochs: int | None = None

    def __post_init__(self) -> None:
        if not math.isfinite(self.initial) or self.initial <= 0.0:
            raise ConfigurationError(f"learning rate must be positive, got {self.initial}")
        if self.policy not in {"fixed", "linear"}:
            raise ConfigurationError(
                f"learning rate policy must be 'fixed' or 'linear', got {self.policy!r}"
            )
        if self.policy == "linear":
            if self.decay_epochs is None or self.decay_epochs < 1:
                raise ConfigurationError("linear learning rate decay needs decay_epochs >= 1")
            if self.final is None:
                object.__setattr__(self, "final", self.initial / 10.0)
            if self.final < 0.0:  # type: ignore[operator]
                raise ConfigurationError("final learning rate must not be negative")

    def value_at(self, epoch: int) -> float:
        """Learning rate for the 0-based ``epoch``."""

        if self.policy == "fixed":
            return float(self.initial)
        progress = min(epoch / float(self.decay_epochs), 1.0)  # type: ignore[arg-type]
        return float(self.initial + (self.final - self.initial) * progress)  # type: ignore[operator]

    @classmethod
    def coerce(cls, value: "LearningRate | float | Mapping[str, Any]") -> "LearningRate":
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            try:
                return cls(**value)
            except (TypeError, ValueError) as exc:
                if isinstance(exc, ConfigurationError):
                    raise
                raise ConfigurationError(f"Invalid learning rate config: {value!r}") from exc
        return cls(_number(value, float, "learning_rate"))


@dataclass(frozen=True)
class EpochStats:
    """Figures a stopping criterion is evaluated against."""

    epoch: int
    mse: float
    elapsed: float


_CRITERION_REASONS = {
    "epochs": StopReason.MAX_EPOCHS,
    "error_threshold": StopReason.CONVERGED,
    "time_budget": StopReason.TIMEOUT,
    "divergence": StopReason.DIVERGED,
}


@dataclass(frozen=True)
class Criterion:
    """Stopping criterion evaluated at every epoch boundary."""

    kind: str
    value: float = 0.0

    def __post_init__(self) -> None:
        if self.kind not in _CRITERION_REASONS:
            available = ", ".join(sorted(_CRITERION_REASONS))
            raise ConfigurationError(
                f"Unknown criterion {self.kind!r}. Available criteria: {available}"
            )
        if self.kind == "epochs" and (
            not math.isfinite(self.value) or self.value < 1 or self.value != int(self.value)
        ):
            raise ConfigurationError(f"epoch criterion needs a positive integer, got {self.value}")
        if self.kind in {"error_threshold", "time_budget"} and not self.value > 0.0:
            raise ConfigurationError(f"{self.kind} criterion must be positive, got {self.value}")

    @classmethod
    def epochs(cls, n: int) -> "Criterion":
        return cls("epochs", float(n))

    @classmethod
    def error_threshold(cls, eps: float) -> "Criterion":
        return cls("error_threshold", float(eps))

    @classmethod
    def time_budget(cls, seconds: float) -> "Criterion":
        return cls("time_budget", float(seconds))

    @classmethod
    def divergence(cls) -> "Criterion":
        return cls("divergence")

    @property
    def reason(self) -> StopReason:
        return _CRITERION_REASONS[self.kind]

    def is_satisfied(self, stats: EpochStats) -> bool:
        if self.kind == "epochs":
            return stats.epoch >= self.value
        if self.kind == "error_threshold":
            return stats.mse < self.value
        if self.kind == "time_budget":
            return stats.elapsed >= self.value
        return not math.isfinite(stats.mse)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "Criterion":
        if not isinstance(mapping, Mapping) or len(mapping) != 1:
            raise ConfigurationError(f"a criterion mapping needs exactly one key, got {mapping!r}")
        ((kind, value),) = mapping.items()
        if kind == "divergence":
            if value is not True:
                raise ConfigurationError(f"divergence criterion takes 'true', got {value!r}")
            return cls.divergence()
        try:
            numeric = float(value)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid value for criterion {kind!r}: {value!r}") from exc
        return cls(str(kind), numeric)

    def to_mapping(self) -> Dict[str, Any]:
        if self.kind == "divergence":
            return {"divergence": True}
        if self.kind == "epochs":
            return {"epochs": int(self.value)}
        return {self.kind: self.value}


@dataclass(frozen=True)
class LogConfig:
    """When epoch metrics are handed to callbacks.

    At most one of ``epoch_interval`` and ``seconds_interval`` is set; with
    neither set only the final epoch is reported.
    """

    epoch_interval: int | None = None
    seconds_interval: float | None = None

    def __post_init__(self) -> None:
        if self.epoch_interval is not None and self.seconds_interval is not None:
            raise ConfigurationError("log either every n epochs or every n seconds, not both")
        if self.epoch_interval is not None and self.epoch_interval < 1:
            raise ConfigurationError("epoch log interval must be >= 1")
        if self.seconds_interval is not None and not self.seconds_interval > 0.0:
            raise ConfigurationError("log interval in seconds must be positive")

    @classmethod
    def never(cls) -> "LogConfig":
        return cls()

    @classmethod
    def every_epochs(cls, n: int) -> "LogConfig":
        return cls(epoch_interval=int(n))

    @classmethod
    def every_seconds(cls, seconds: float) -> "LogConfig":
        return cls(seconds_interval=float(seconds))

    def should_log(self, epoch: int, now: float, last_logged: float) -> bool:
        if self.epoch_interval is not None:
            return epoch % self.epoch_interval == 0
        if self.seconds_interval is not None:
            return now - last_logged >= self.seconds_interval
        return False

    @classmethod
    def coerce(cls, value: "LogConfig | str | Mapping[str, Any] | None") -> "LogConfig":
        if isinstance(value, cls):
            return value
        if value is None or value == "never":
            return cls.never()
        if isinstance(value, Mapping):
            if "every_epochs" in value:
                return cls.every_epochs(_number(value["every_epochs"], int, "log.every_epochs"))
            if "every_seconds" in value:
                return cls.every_seconds(
                    _number(value["every_seconds"], float, "log.every_seconds")
                )
        raise ConfigurationError(f"Invalid log config: {value!r}")

    def to_mapping(self) -> Dict[str, Any] | str:
        if self.epoch_interval is not None:
            return {"every_epochs": self.epoch_interval}
        if self.seconds_interval is not None:
            return {"every_seconds": self.seconds_interval}
        return "never"


_MENTOR_KEYS = frozenset(
    {
        "learning_rate",
        "momentum",
        "scheduling",
        "batch_size",
        "retain_momentum",
        "criteria",
        "max_epochs",
        "log",
        "seed",
    }
)


def _default_criteria() -> List[Criterion]:
    return [Criterion.epochs(1000)]


@dataclass
class MentorConfig:
    """Everything a :class:`~mentornets.training.mentor.Mentor` needs besides data.

    ``batch_size`` selects the batching policy: ``1`` applies deltas after
    every sample (online), ``n`` after every ``n`` samples (mini-batch) and
    ``None`` once per epoch (full batch).  Training stops at the first
    satisfied criterion and in any case after ``max_epochs``.
    """

    learning_rate: LearningRate | float = 0.1
    momentum: float = 0.0
    scheduling: Scheduling | str = Scheduling.SEQUENTIAL
    batch_size: int | None = 1
    retain_momentum: bool = True
    criteria: Sequence[Criterion] = field(default_factory=_default_criteria)
    max_epochs: int = 100_000
    log: LogConfig = field(default_factory=LogConfig.never)
    seed: int = 0

    def __post_init__(self) -> None:
        self.learning_rate = LearningRate.coerce(self.learning_rate)
        self.scheduling = Scheduling.from_name(self.scheduling)
        self.log = LogConfig.coerce(self.log)
        self.criteria = [
            c if isinstance(c, Criterion) else Criterion.from_mapping(c)  # type: ignore[arg-type]
            for c in self.criteria
        ]
        if not math.isfinite(self.momentum) or not 0.0 <= self.momentum < 1.0:
            raise ConfigurationError(f"momentum must be in [0, 1), got {self.momentum}")
        if self.batch_size is not None and self.batch_size < 1:
            raise ConfigurationError(f"batch_size must be >= 1 or None, got {self.batch_size}")
        if self.max_epochs < 1:
            raise ConfigurationError(f"max_epochs must be >= 1, got {self.max_epochs}")

    @classmethod
    def from_mapping(
        cls, mapping: Mapping[str, Any], *, extra_keys: Iterable[str] = ()
    ) -> "MentorConfig":
        """Build a config from the plain mapping used by YAML/JSON files.

        Keys listed in ``extra_keys`` belong to the caller and are skipped;
        any other unknown key is an error.
        """

        unknown = set(mapping) - _MENTOR_KEYS - set(extra_keys)
        if unknown:
            raise ConfigurationError(
                f"Unknown mentor config keys: {', '.join(sorted(map(str, unknown)))}"
            )
        kwargs = {key: value for key, value in mapping.items() if key in _MENTOR_KEYS}
        if "momentum" in kwargs:
            kwargs["momentum"] = _number(kwargs["momentum"], float, "momentum")
        if kwargs.get("batch_size") is not None:
            kwargs["batch_size"] = _number(kwargs["batch_size"], int, "batch_size")
        for key in ("max_epochs", "seed"):
            if key in kwargs:
                kwargs[key] = _number(kwargs[key], int, key)
        if "retain_momentum" in kwargs and not isinstance(kwargs["retain_momentum"], bool):
            raise ConfigurationError(
                f"retain_momentum must be true or false, got {kwargs['retain_momentum']!r}"
            )
        if "criteria" in kwargs and (
            isinstance(kwargs["criteria"], (str, Mapping))
            or not isinstance(kwargs["criteria"], Sequence)
        ):
            raise ConfigurationError(f"criteria must be a list, got {kwargs['criteria']!r}")
        return cls(**kwargs)

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "learning_rate": asdict(self.learning_rate),  # type: ignore[arg-type]
            "momentum": self.momentum,
            "scheduling": self.scheduling.value,  # type: ignore[union-attr]
            "batch_size": self.batch_size,
            "retain_momentum": self.retain_momentum,
            "criteria": [c.to_mapping() for c in self.criteria],
            "max_epochs": self.max_epochs,
            "log": self.log.to_mapping(),
            "seed": self.seed,
        }


__all__ = [
    "Scheduling",
    "StopReason",
    "LearningRate",
    "EpochStats",
    "Criterion",
    "LogConfig",
    "MentorConfig",
]
