"""Core typing contracts for mentornets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

import numpy as np

Array = np.ndarray

DTYPE = np.float32


@dataclass(frozen=True)
class ModelDescription:
    """Description of a feed-forward network architecture."""

    layer_dims: List[int]
    activations: List[str]


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`mentornets.training.pipelines.run_pipeline`."""

    epochs: int
    reason: str
    mse: float
    metrics_path: str
    manifest_path: str
    summary_path: str = ""
