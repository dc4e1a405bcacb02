"""Metric sinks receiving the mentor's epoch reports."""

from __future__ import annotations

import csv
import json
import sys
from pathlib import Path
from typing import Mapping, TextIO

from .artifacts import _git_sha


def _numeric(metrics: Mapping[str, object]) -> dict[str, float]:
    return {k: float(v) for k, v in metrics.items() if isinstance(v, (int, float))}


class JsonlSink:
    """Append-only JSONL writer for epoch metrics."""

    def __init__(
        self,
        path: str | Path,
        *,
        run: str = "train",
        seed: int | None = None,
        sha: str | None = None,
    ) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.run = run
        self.seed = seed
        self.sha = sha or _git_sha()

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        record: dict[str, object] = {
            "epoch": int(epoch),
            "run": self.run,
            "seed": self.seed,
            "sha": self.sha,
        }
        record.update(_numeric(metrics))
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record) + "\n")

    __call__ = on_epoch


class CsvSink:
    """Write epoch metrics to CSV with a stable, sorted schema."""

    def __init__(self, path: str | Path, *, run: str = "train") -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.run = run

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        row: dict[str, object] = {"epoch": int(epoch), "run": self.run}
        row.update(_numeric(metrics))
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=sorted(row.keys()))
            if handle.tell() == 0:
                writer.writeheader()
            writer.writerow(row)

    __call__ = on_epoch


class ConsoleLogger:
    """Print one progress line per reported epoch."""

    def __init__(self, stream: TextIO | None = None, *, prefix: str = "mentor") -> None:
        self.stream = stream
        self.prefix = prefix

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        parts = [f"[{self.prefix}] epoch {int(epoch):>6}"]
        for key in ("mse", "recent_mse", "learning_rate"):
            if key in metrics:
                parts.append(f"{key}={float(metrics[key]):.6g}")
        if "elapsed" in metrics:
            parts.append(f"elapsed={float(metrics['elapsed']):.2f}s")
        print("  ".join(parts), file=self.stream or sys.stdout)

    __call__ = on_epoch


__all__ = ["JsonlSink", "CsvSink", "ConsoleLogger"]
