"""Run manifest describing a finished mentor run."""

from __future__ import annotations

import json
import math
import platform
import subprocess
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Mapping

if TYPE_CHECKING:  # pragma: no cover
    from ..training.mentor import TrainingResult


def _git_sha() -> str:
    try:
        out = subprocess.check_output(["git", "rev-parse", "HEAD"], stderr=subprocess.DEVNULL)
        return out.decode().strip()
    except Exception:  # pragma: no cover - git may be unavailable in tests
        return "unknown"


def _finite(value: float) -> float | None:
    return float(value) if math.isfinite(value) else None


def build_manifest(
    result: "TrainingResult",
    *,
    config: Mapping[str, object],
    dataset_provenance: Mapping[str, object],
    final_mse: float | None = None,
) -> Dict[str, Any]:
    """Describe why and where training stopped and what was trained.

    ``final_mse`` is the error of the trained network over the whole sample
    set; it defaults to the error of the last epoch.  Non-finite errors are
    stored as ``null``.
    """

    network = result.network.describe()
    mse = result.mse if final_mse is None else final_mse
    return {
        "reason": result.reason.value,
        "epochs": result.epochs,
        "mse": _finite(mse),
        "best_mse": _finite(result.best_mse),
        "elapsed": round(result.elapsed, 6),
        "network": {
            "dims": network.layer_dims,
            "activations": network.activations,
            "parameters": result.network.parameter_count(),
        },
        "dataset": dict(dataset_provenance),
        "config": config,
        "git_sha": _git_sha(),
        "generated_at": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "python": platform.python_version(),
    }


def write_manifest(
    path: str | Path,
    result: "TrainingResult",
    *,
    config: Mapping[str, object],
    dataset_provenance: Mapping[str, object],
    final_mse: float | None = None,
) -> str:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    manifest = build_manifest(
        result, config=config, dataset_provenance=dataset_provenance, final_mse=final_mse
    )
    path.write_text(json.dumps(manifest, indent=2, default=str))
    return str(path)


__all__ = ["build_manifest", "write_manifest"]
