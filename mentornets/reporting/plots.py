"""Headless-safe plotting adapters."""

from __future__ import annotations

from pathlib import Path
from typing import List, Mapping, Tuple


class PlotAdapter:
    """Collect the epoch error and optionally emit a matplotlib learning curve."""

    def __init__(self, run_dir: str | Path, enable_plots: bool = False, *, metric: str = "mse"):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self.metric = metric
        self._history: List[Tuple[int, float]] = []
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        if not self.enable_plots or self.metric not in metrics:
            return
        self._history.append((int(epoch), float(metrics[self.metric])))

    def close(self) -> Path | None:
        if not self.enable_plots or not self._history:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # imported lazily for headless safety

        epochs, values = zip(*self._history)
        fig, ax = plt.subplots()
        ax.plot(epochs, values)
        ax.set_xlabel("Epoch")
        ax.set_ylabel(self.metric.upper())
        if all(v > 0 for v in values):
            ax.set_yscale("log")
        ax.set_title("Training Curve")
        plot_path = self.run_dir / "loss.png"
        fig.savefig(plot_path)
        plt.close(fig)
        return plot_path

    __call__ = on_epoch
