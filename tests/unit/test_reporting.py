import csv
import io
import json
import math

import numpy as np
import pytest

from mentornets.core.network import NeuralNet
from mentornets.reporting import artifacts, metrics
from mentornets.reporting.artifacts import build_manifest, write_manifest
from mentornets.reporting.metrics import ConsoleLogger, CsvSink, JsonlSink
from mentornets.reporting.plots import PlotAdapter
from mentornets.reporting.summary import build_summary, error_curve, write_summary
from mentornets.topology import Topology
from mentornets.training.configs import StopReason
from mentornets.training.mentor import TrainingResult


def test_jsonl_sink_records(tmp_path):
    sink = JsonlSink(tmp_path / "metrics.jsonl", run="xor", seed=3, sha="abc")
    sink.on_epoch(1, {"mse": 0.5, "learning_rate": 0.1})
    sink(2, {"mse": 0.25, "note": "skipped"})
    lines = (tmp_path / "metrics.jsonl").read_text().splitlines()
    records = [json.loads(line) for line in lines]
    assert records[0] == {
        "epoch": 1,
        "run": "xor",
        "seed": 3,
        "sha": "abc",
        "mse": 0.5,
        "learning_rate": 0.1,
    }
    assert "note" not in records[1]


def test_csv_sink_writes_header_once(tmp_path):
    sink = CsvSink(tmp_path / "metrics.csv", run="xor")
    sink.on_epoch(1, {"mse": 0.5})
    sink.on_epoch(2, {"mse": 0.25})
    with (tmp_path / "metrics.csv").open() as handle:
        rows = list(csv.DictReader(handle))
    assert [row["epoch"] for row in rows] == ["1", "2"]
    assert rows[1]["mse"] == "0.25"


def test_console_logger_prints_one_line():
    stream = io.StringIO()
    ConsoleLogger(stream, prefix="xor").on_epoch(
        10, {"mse": 0.125, "recent_mse": 0.2, "learning_rate": 0.5, "elapsed": 1.234}
    )
    line = stream.getvalue().strip()
    assert line.startswith("[xor] epoch     10")
    assert "mse=0.125" in line
    assert "elapsed=1.23s" in line
    assert "\n" not in line


def test_plot_adapter_headless(tmp_path):
    adapter = PlotAdapter(tmp_path, enable_plots=True)
    adapter.on_epoch(1, {"mse": 1.0})
    adapter.on_epoch(2, {"mse": 0.5})
    path = adapter.close()
    assert path == tmp_path / "loss.png"
    assert path.exists()


def test_plot_adapter_disabled_writes_nothing(tmp_path):
    adapter = PlotAdapter(tmp_path / "run", enable_plots=False)
    adapter.on_epoch(1, {"mse": 1.0})
    assert adapter.close() is None
    assert not (tmp_path / "run").exists()


def _result(reason=StopReason.CONVERGED, mse=0.004, best_mse=0.004):
    topology = Topology.input(2).layer(3, "tanh").output(1, "logistic")
    net = NeuralNet.from_topology(topology, np.random.default_rng(0))
    return TrainingResult(
        network=net, reason=reason, epochs=30, mse=mse, best_mse=best_mse, elapsed=1.5
    )


def test_error_curve_tracks_best_reported_epoch():
    records = [
        {"epoch": 10, "mse": 0.4},
        {"epoch": 20, "mse": 0.05},
        {"epoch": 30, "mse": 0.1},
        {"epoch": 40, "mse": math.inf},
    ]
    curve = error_curve(records)
    assert curve["reports"] == 4
    assert (curve["first_mse"], curve["last_mse"]) == (0.4, 0.1)
    assert (curve["min_mse"], curve["min_epoch"]) == (0.05, 20)
    assert curve["improvement"] == pytest.approx(4.0)
    assert error_curve([])["min_epoch"] is None


def test_summary_reports_stop_outcome(tmp_path):
    metrics_path = tmp_path / "metrics.jsonl"
    metrics_path.write_text(
        "\n".join(json.dumps(r) for r in [{"epoch": 10, "mse": 0.2}, {"epoch": 20, "mse": 0.01}])
        + "\n"
    )
    out = write_summary(metrics_path, tmp_path / "summary.json", _result(), final_mse=0.003)
    payload = json.loads((tmp_path / "summary.json").read_text())
    assert out == str(tmp_path / "summary.json")
    assert payload["reason"] == "converged"
    assert payload["converged"] is True
    assert payload["epochs"] == 30
    assert payload["final_mse"] == 0.003
    assert payload["curve"]["min_epoch"] == 20
    assert "elapsed" not in payload


def test_summary_of_diverged_run_stores_null_errors():
    summary = build_summary(
        [{"epoch": 1, "mse": math.nan}],
        _result(reason=StopReason.DIVERGED, mse=math.nan, best_mse=math.inf),
    )
    assert summary["converged"] is False
    assert summary["final_mse"] is None
    assert summary["best_mse"] is None
    assert summary["curve"]["first_mse"] is None
    assert json.loads(json.dumps(summary)) == summary


def test_manifest_leads_with_outcome(tmp_path):
    path = write_manifest(
        tmp_path / "nested" / "manifest.json",
        _result(reason=StopReason.MAX_EPOCHS),
        config={"train": {"seed": 1}},
        dataset_provenance={"type": "boolean_gate"},
    )
    manifest = json.loads((tmp_path / "nested" / "manifest.json").read_text())
    assert path.endswith("manifest.json")
    assert manifest["reason"] == "max_epochs"
    assert manifest["epochs"] == 30
    assert manifest["mse"] == pytest.approx(0.004)
    assert manifest["network"] == {
        "dims": [2, 3, 1],
        "activations": ["tanh", "logistic"],
        "parameters": 3 * 3 + 4,
    }
    assert manifest["config"] == {"train": {"seed": 1}}
    assert manifest["dataset"]["type"] == "boolean_gate"


def test_manifest_and_jsonl_share_git_sha(tmp_path, monkeypatch):
    monkeypatch.setattr(artifacts, "_git_sha", lambda: "feedbeef")
    manifest = build_manifest(_result(), config={}, dataset_provenance={})
    assert manifest["git_sha"] == "feedbeef"
    monkeypatch.setattr(metrics, "_git_sha", lambda: "feedbeef")
    sink = JsonlSink(tmp_path / "metrics.jsonl")
    sink.on_epoch(1, {"mse": 0.5})
    record = json.loads((tmp_path / "metrics.jsonl").read_text())
    assert record["sha"] == "feedbeef"
