"""Builtin sample sources: boolean gates, a noisy sine and CSV files."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import numpy as np

from ..core.types import DTYPE
from ..errors import ConfigurationError
from ..training.samples import SampleCollection
from .registry import DatasetSpec, register_dataset

_GATES = {
    "xor": (0.0, 1.0, 1.0, 0.0),
    "and": (0.0, 0.0, 0.0, 1.0),
    "or": (0.0, 1.0, 1.0, 1.0),
}


def _gate(name: str, signed: bool) -> DatasetSpec:
    inputs = np.array([[0, 0], [0, 1], [1, 0], [1, 1]], dtype=DTYPE)
    targets = np.array(_GATES[name], dtype=DTYPE).reshape(-1, 1)
    if signed:
        inputs = inputs * 2.0 - 1.0
        targets = targets * 2.0 - 1.0
    return DatasetSpec(
        name=name,
        samples=SampleCollection.from_arrays(inputs, targets),
        provenance={"type": "boolean_gate", "gate": name, "signed": signed},
    )


@register_dataset("xor")
def make_xor(signed: bool = False, **_: object) -> DatasetSpec:
    return _gate("xor", signed)


@register_dataset("and")
def make_and(signed: bool = False, **_: object) -> DatasetSpec:
    return _gate("and", signed)


@register_dataset("or")
def make_or(signed: bool = False, **_: object) -> DatasetSpec:
    return _gate("or", signed)


@register_dataset("sine")
def make_sine(
    freq: float = 1.0,
    n_points: int = 64,
    noise: float = 0.0,
    seed: int = 0,
    **_: object,
) -> DatasetSpec:
    """``y = sin(freq * pi * x)`` sampled on ``[-1, 1]``."""

    rng = np.random.default_rng(seed)
    x = np.linspace(-1.0, 1.0, int(n_points), dtype=DTYPE).reshape(-1, 1)
    y = np.sin(freq * np.pi * x)
    if noise:
        y = y + noise * rng.standard_normal(size=y.shape)
    return DatasetSpec(
        name="sine",
        samples=SampleCollection.from_arrays(x, y.astype(DTYPE)),
        provenance={
            "type": "synthetic",
            "freq": freq,
            "n_points": int(n_points),
            "noise": noise,
            "seed": seed,
        },
    )


@register_dataset("csv")
def make_csv(
    path: str | Path | None = None,
    target_cols: int | Sequence[int] = 1,
    delimiter: str = ",",
    skip_header: int = 1,
    **_: object,
) -> DatasetSpec:
    """Load samples from a numeric CSV file.

    ``target_cols`` is either the number of trailing target columns or an
    explicit list of target column indices.  Negative indices count from the
    last column, as in numpy.
    """

    if path is None:
        raise ConfigurationError("the csv dataset needs a 'path' option")
    table = np.loadtxt(Path(path), delimiter=delimiter, skiprows=skip_header, dtype=DTYPE, ndmin=2)
    n_cols = table.shape[1]
    if isinstance(target_cols, int):
        if not 0 < target_cols < n_cols:
            raise ConfigurationError(
                f"target_cols={target_cols} leaves no input columns in {n_cols} columns"
            )
        target_idx = list(range(n_cols - target_cols, n_cols))
    else:
        target_idx = []
        for raw in target_cols:
            index = int(raw)
            if not -n_cols <= index < n_cols:
                raise ConfigurationError(
                    f"target column {index} is out of range for {n_cols} columns"
                )
            index %= n_cols
            if index in target_idx:
                raise ConfigurationError(f"target column {raw} is listed twice")
            target_idx.append(index)
    input_idx = [i for i in range(n_cols) if i not in target_idx]
    if not input_idx or not target_idx:
        raise ConfigurationError("the csv dataset needs at least one input and one target column")
    return DatasetSpec(
        name="csv",
        samples=SampleCollection.from_arrays(table[:, input_idx], table[:, target_idx]),
        provenance={
            "type": "csv",
            "path": str(path),
            "rows": int(table.shape[0]),
            "target_cols": target_idx,
        },
    )


__all__ = ["make_xor", "make_and", "make_or", "make_sine", "make_csv"]
