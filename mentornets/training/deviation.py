"""Running error statistics of a training run."""

from __future__ import annotations

import math

import numpy as np

from ..core.types import Array


class Deviation:
    """Accumulate per-sample mean squared errors and summarise them per epoch.

    ``recent_mse`` is an exponential moving average of the epoch errors,
    which smooths the noise random scheduling adds to the raw epoch figure.
    """

    def __init__(self, smoothing: float = 0.1) -> None:
        if not 0.0 < smoothing <= 1.0:
            raise ValueError(f"smoothing must be in (0, 1], got {smoothing}")
        self.smoothing = smoothing
        self.epochs = 0
        self.latest_mse = math.inf
        self.recent_mse = math.inf
        self.best_mse = math.inf
        self._sum = 0.0
        self._count = 0

    def record(self, error: Array) -> float:
        """Record the error vector of one sample and return its MSE."""

        mse = float(np.mean(np.square(error, dtype=np.float64)))
        self._sum += mse
        self._count += 1
        return mse

    def end_epoch(self) -> float:
        """Close the current epoch and return its mean squared error."""

        if self._count == 0:
            raise RuntimeError("no samples recorded in this epoch")
        mse = self._sum / self._count
        self.latest_mse = mse
        if self.epochs == 0:
            self.recent_mse = mse
        else:
            self.recent_mse = (1.0 - self.smoothing) * self.recent_mse + self.smoothing * mse
        # NaN never compares smaller, so best_mse stays finite on divergence.
        if mse < self.best_mse:
            self.best_mse = mse
        self.epochs += 1
        self._sum = 0.0
        self._count = 0
        return mse


__all__ = ["Deviation"]
