"""Immutable training samples and per-epoch presentation order."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Sequence, Tuple, Union, overload

import numpy as np

from ..core.types import DTYPE, Array
from ..errors import ConfigurationError
from .configs import Scheduling


def _frozen_vector(values: object, role: str) -> Array:
    data = np.array(values, dtype=DTYPE)
    if data.ndim != 1 or data.shape[0] == 0:
        raise ConfigurationError(
            f"sample {role} must be a non-empty vector, got shape {data.shape}"
        )
    data.flags.writeable = False
    return data


@dataclass(frozen=True, eq=False)
class Sample:
    """A pair of input and expected target vectors."""

    input: Array
    target: Array

    def __post_init__(self) -> None:
        object.__setattr__(self, "input", _frozen_vector(self.input, "input"))
        object.__setattr__(self, "target", _frozen_vector(self.target, "target"))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Sample):
            return NotImplemented
        return bool(
            np.array_equal(self.input, other.input)
            and np.array_equal(self.target, other.target)
        )

    __hash__ = None  # type: ignore[assignment]


SampleLike = Union[Sample, Tuple[object, object]]


class SampleCollection(Sequence[Sample]):
    """Non-empty, homogeneous collection of samples."""

    def __init__(self, samples: Iterable[SampleLike]) -> None:
        items: List[Sample] = [
            s if isinstance(s, Sample) else Sample(*s) for s in samples
        ]
        if not items:
            raise ConfigurationError("cannot train on an empty sample collection")
        len_input = items[0].input.shape[0]
        len_output = items[0].target.shape[0]
        for idx, sample in enumerate(items):
            if sample.input.shape[0] != len_input or sample.target.shape[0] != len_output:
                raise ConfigurationError(
                    f"sample {idx} has shape ({sample.input.shape[0]}, "
                    f"{sample.target.shape[0]}) but sample 0 has "
                    f"({len_input}, {len_output})"
                )
        self._samples: Tuple[Sample, ...] = tuple(items)

    @classmethod
    def from_arrays(cls, inputs: Array, targets: Array) -> "SampleCollection":
        inputs = np.asarray(inputs, dtype=DTYPE)
        targets = np.asarray(targets, dtype=DTYPE)
        if inputs.ndim == 1:
            inputs = inputs.reshape(-1, 1)
        if targets.ndim == 1:
            targets = targets.reshape(-1, 1)
        if inputs.shape[0] != targets.shape[0]:
            raise ConfigurationError(
                f"got {inputs.shape[0]} inputs but {targets.shape[0]} targets"
            )
        return cls(Sample(x, y) for x, y in zip(inputs, targets))

    @property
    def len_input(self) -> int:
        return int(self._samples[0].input.shape[0])

    @property
    def len_output(self) -> int:
        return int(self._samples[0].target.shape[0])

    def validate(self, len_input: int, len_output: int) -> None:
        """Check the samples against a network's input and output sizes."""

        if self.len_input != len_input:
            raise ConfigurationError(
                f"samples have {self.len_input} inputs but the topology expects {len_input}"
            )
        if self.len_output != len_output:
            raise ConfigurationError(
                f"samples have {self.len_output} targets but the topology produces {len_output}"
            )

    def __len__(self) -> int:
        return len(self._samples)

    @overload
    def __getitem__(self, index: int) -> Sample: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[Sample]: ...

    def __getitem__(self, index):
        return self._samples[index]

    def __iter__(self) -> Iterator[Sample]:
        return iter(self._samples)

    def __repr__(self) -> str:
        return (
            f"SampleCollection(n={len(self)}, len_input={self.len_input}, "
            f"len_output={self.len_output})"
        )


class SampleScheduler:
    """Yield samples in the order dictated by a :class:`Scheduling` policy."""

    def __init__(
        self,
        samples: SampleCollection,
        scheduling: Scheduling,
        rng: np.random.Generator,
    ) -> None:
        self.samples = samples
        self.scheduling = Scheduling.from_name(scheduling)
        self._rng = rng
        self._sequential = np.arange(len(samples))

    def order(self) -> Array:
        if self.scheduling is Scheduling.RANDOM:
            return self._rng.permutation(len(self.samples))
        return self._sequential

    def epoch(self) -> Iterator[Sample]:
        for idx in self.order():
            yield self.samples[int(idx)]


__all__ = ["Sample", "SampleCollection", "SampleScheduler"]
