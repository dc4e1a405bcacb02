"""Deterministic summary of a mentor run's error curve."""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Sequence

if TYPE_CHECKING:  # pragma: no cover
    from ..training.mentor import TrainingResult


def _finite(value: float | None) -> float | None:
    if value is None or not math.isfinite(value):
        return None
    return float(value)


def read_records(metrics_jsonl: str | Path) -> List[Dict[str, Any]]:
    path = Path(metrics_jsonl)
    if not path.exists():
        return []
    return [json.loads(line) for line in path.read_text().splitlines() if line.strip()]


def error_curve(records: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
    """Summarise the reported ``mse`` values of a run.

    ``min_epoch`` is the reported epoch with the lowest error; ``improvement``
    is the ratio of the first to the last reported error.
    """

    points = [
        (int(r["epoch"]), float(r["mse"]))
        for r in records
        if isinstance(r.get("mse"), (int, float)) and math.isfinite(r["mse"])
    ]
    if not points:
        return {"reports": len(records), "first_mse": None, "last_mse": None,
                "min_mse": None, "min_epoch": None, "improvement": None}
    min_epoch, min_mse = min(points, key=lambda p: p[1])
    first, last = points[0][1], points[-1][1]
    return {
        "reports": len(records),
        "first_mse": first,
        "last_mse": last,
        "min_mse": min_mse,
        "min_epoch": min_epoch,
        "improvement": first / last if last > 0.0 else None,
    }


def build_summary(
    records: Sequence[Mapping[str, Any]],
    result: "TrainingResult",
    *,
    final_mse: float | None = None,
) -> Dict[str, Any]:
    """Combine the stop outcome with the reported error curve.

    Wall-clock figures are left out so two runs with the same seed produce
    identical summaries.
    """

    reason = result.reason.value
    return {
        "version": 2,
        "reason": reason,
        "converged": reason == "converged",
        "epochs": result.epochs,
        "final_mse": _finite(result.mse if final_mse is None else final_mse),
        "best_mse": _finite(result.best_mse),
        "curve": error_curve(records),
    }


def write_summary(
    metrics_jsonl: str | Path,
    out_summary_json: str | Path,
    result: "TrainingResult",
    *,
    final_mse: float | None = None,
) -> str:
    out_path = Path(out_summary_json)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    summary = build_summary(read_records(metrics_jsonl), result, final_mse=final_mse)
    out_path.write_text(json.dumps(summary, sort_keys=True, indent=2))
    return str(out_path)


__all__ = ["build_summary", "error_curve", "read_records", "write_summary"]
