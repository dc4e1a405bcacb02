"""The mentor: a gradient-descent training loop for feed-forward networks."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Mapping, Sequence

import numpy as np

from ..core.network import NeuralNet
from ..topology import Topology
from .configs import EpochStats, MentorConfig, StopReason
from .deviation import Deviation
from .samples import SampleCollection, SampleLike, SampleScheduler


class MentorState(str, Enum):
    INITIALIZING = "initializing"
    TRAINING = "training"
    STOPPED = "stopped"


@dataclass(frozen=True)
class TrainingResult:
    """Summary returned by :meth:`Mentor.train`."""

    network: NeuralNet
    reason: StopReason
    epochs: int
    mse: float
    best_mse: float
    elapsed: float
    history: List[Mapping[str, float]] = field(default_factory=list)


class Mentor:
    """Fit a network built from ``topology`` to ``samples``.

    Samples are validated against the topology on construction; a mismatch
    raises :class:`~mentornets.errors.ConfigurationError` before any training
    happens.  A mentor trains once: :meth:`train` returns the trained network
    and leaves the mentor in the ``STOPPED`` state.

    Callbacks receive ``on_epoch(epoch, metrics)`` (or are called directly)
    whenever ``config.log`` asks for it and always for the final epoch.
    """

    def __init__(
        self,
        topology: Topology,
        samples: SampleCollection | Iterable[SampleLike],
        config: MentorConfig | None = None,
        callbacks: Sequence[object] | None = None,
    ) -> None:
        self.config = config or MentorConfig()
        if not isinstance(samples, SampleCollection):
            samples = SampleCollection(samples)
        samples.validate(topology.len_input(), topology.len_output())
        self.topology = topology
        self.samples = samples
        self.callbacks = list(callbacks or [])
        self._rng = np.random.default_rng(self.config.seed)
        self.network = NeuralNet.from_topology(topology, self._rng)
        self._scheduler = SampleScheduler(samples, self.config.scheduling, self._rng)
        self.deviation = Deviation()
        self.state = MentorState.INITIALIZING
        self.epoch = 0
        self.learning_rate = self.config.learning_rate.value_at(0)  # type: ignore[union-attr]

    def train(self) -> TrainingResult:
        if self.state is not MentorState.INITIALIZING:
            raise RuntimeError("this mentor has already trained its network; create a new one")
        self.state = MentorState.TRAINING
        self.network.reset()

        history: List[Mapping[str, float]] = []
        start = time.perf_counter()
        last_logged = start
        reason: StopReason | None = None
        while reason is None:
            mse = self._run_epoch()
            self.epoch += 1
            now = time.perf_counter()
            stats = EpochStats(epoch=self.epoch, mse=mse, elapsed=now - start)
            reason = self._check_criteria(stats)
            if reason is not None or self.config.log.should_log(self.epoch, now, last_logged):
                metrics = self._metrics(stats)
                history.append(metrics)
                self._emit_epoch(self.epoch, metrics)
                last_logged = now
            self.learning_rate = self.config.learning_rate.value_at(self.epoch)  # type: ignore[union-attr]

        self.state = MentorState.STOPPED
        return TrainingResult(
            network=self.network,
            reason=reason,
            epochs=self.epoch,
            mse=self.deviation.latest_mse,
            best_mse=self.deviation.best_mse,
            elapsed=time.perf_counter() - start,
            history=history,
        )

    # ------------------------------------------------------------------
    # Internal helpers

    def _run_epoch(self) -> float:
        batch_size = self.config.batch_size
        pending = 0
        for sample in self._scheduler.epoch():
            self.network.forward(sample.input)
            error = self.network.backward(sample.target)
            self.deviation.record(error)
            pending += 1
            if batch_size is not None and pending >= batch_size:
                self._apply_deltas()
                pending = 0
        if pending:
            self._apply_deltas()
        return self.deviation.end_epoch()

    def _apply_deltas(self) -> None:
        self.network.apply_deltas(
            self.learning_rate,
            self.config.momentum,
            retain_momentum=self.config.retain_momentum,
        )

    def _check_criteria(self, stats: EpochStats) -> StopReason | None:
        for criterion in self.config.criteria:
            if criterion.is_satisfied(stats):
                return criterion.reason
        if stats.epoch >= self.config.max_epochs:
            return StopReason.MAX_EPOCHS
        return None

    def _metrics(self, stats: EpochStats) -> Mapping[str, float]:
        return {
            "mse": stats.mse,
            "recent_mse": self.deviation.recent_mse,
            "best_mse": self.deviation.best_mse,
            "learning_rate": self.learning_rate,
            "elapsed": stats.elapsed,
        }

    def _emit_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)


__all__ = ["Mentor", "MentorState", "TrainingResult"]
