"""Config-driven training runs with metric sinks and run artifacts."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Mapping, Sequence

import yaml

from ..core.types import RunResult
from ..data import get_dataset
from ..errors import ConfigurationError
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import ConsoleLogger, CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from ..topology import Topology
from .configs import MentorConfig
from .mentor import Mentor

_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor": {
        "data": {"name": "xor", "options": {"signed": False}},
        "model": {
            "hidden": [{"size": 2, "activation": "tanh"}],
            "output": {"size": 1, "activation": "logistic"},
        },
        "train": {
            "learning_rate": 0.5,
            "momentum": 0.5,
            "scheduling": "random",
            "batch_size": 1,
            "criteria": [{"error_threshold": 0.01}, {"divergence": True}],
            "max_epochs": 2000,
            "log": {"every_epochs": 100},
            "seed": 1,
            "run_dir": "runs/xor",
            "enable_plots": False,
        },
    },
    "and-batch": {
        "data": {"name": "and", "options": {}},
        "model": {"hidden": [], "output": {"size": 1, "activation": "logistic"}},
        "train": {
            "learning_rate": 2.0,
            "batch_size": None,
            "criteria": [{"epochs": 500}],
            "log": {"every_epochs": 50},
            "seed": 0,
            "run_dir": "runs/and-batch",
            "enable_plots": False,
        },
    },
    "sine": {
        "data": {"name": "sine", "options": {"freq": 1.0, "n_points": 64, "seed": 0}},
        "model": {
            "hidden": [{"size": 16, "activation": "tanh"}],
            "output": {"size": 1, "activation": "identity"},
        },
        "train": {
            "learning_rate": {"initial": 0.05, "policy": "linear", "final": 0.01, "decay_epochs": 400},
            "momentum": 0.9,
            "scheduling": "random",
            "batch_size": 8,
            "criteria": [{"error_threshold": 0.002}, {"time_budget": 30.0}],
            "max_epochs": 500,
            "log": {"every_epochs": 50},
            "seed": 7,
            "run_dir": "runs/sine",
            "enable_plots": False,
        },
    },
}

_PIPELINE_KEYS = frozenset({"run_dir", "enable_plots", "verbose"})

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None


def load_config_file(path: str | Path) -> Mapping[str, Any]:
    """Read a YAML or JSON config file into a mapping."""

    path = Path(path)
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported config file type: {path.suffix}")
    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        presets: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                data = load_config_file(file)
                missing = {"data", "model", "train"} - set(data)
                if missing:
                    missing_str = ", ".join(sorted(missing))
                    raise KeyError(f"Preset {file.name} is missing required sections: {missing_str}")
                presets[file.stem] = json.loads(json.dumps(data))
        _FILE_PRESETS_CACHE = presets
    return {name: deepcopy(cfg) for name, cfg in _FILE_PRESETS_CACHE.items()}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    file_presets = _file_presets()
    if name in file_presets:
        return file_presets[name]
    try:
        return deepcopy(_PRESETS[name])
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


def merge_config(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into ``base`` and return ``base``."""

    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), dict):
            base[key] = merge_config(dict(base[key]), value)
        else:
            base[key] = value
    return base


def build_topology(
    model_cfg: Mapping[str, Any], len_input: int, len_output: int
) -> Topology:
    """Build a topology from the ``model`` section of a config.

    Hidden layers (``hidden`` or ``layers``) are given as ``{"size",
    "activation"}`` mappings or as bare sizes using ``hidden_activation``.
    Input and output sizes default to the dataset's.
    """

    builder = Topology.input(int(model_cfg.get("d_in", len_input)))
    default_hidden = str(model_cfg.get("hidden_activation", "tanh"))
    hidden = model_cfg.get("hidden", model_cfg.get("layers", []))
    for layer in hidden or []:
        if isinstance(layer, Mapping):
            builder = builder.layer(int(layer["size"]), layer.get("activation", default_hidden))
        else:
            builder = builder.layer(int(layer), default_hidden)
    output = dict(model_cfg.get("output", {}) or {})
    return builder.output(
        int(output.get("size", len_output)), output.get("activation", "identity")
    )


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    """Train the network described by ``config`` and write its run artifacts."""

    for section in ("data", "train"):
        if section not in config:
            raise ConfigurationError(f"config is missing the {section!r} section")
    data_cfg = dict(config["data"])  # type: ignore[arg-type]
    model_cfg = dict(config.get("model", {}) or {})  # type: ignore[arg-type]
    train_cfg = dict(config["train"])  # type: ignore[arg-type]

    dataset = get_dataset(str(data_cfg["name"]), **dict(data_cfg.get("options", {}) or {}))
    topology = build_topology(model_cfg, dataset.len_input, dataset.len_output)
    mentor_cfg = MentorConfig.from_mapping(train_cfg, extra_keys=_PIPELINE_KEYS)

    run_dir = _resolve_run_dir(train_cfg, dataset.name)
    run_dir.mkdir(parents=True, exist_ok=True)
    verbose = bool(train_cfg.get("verbose", True))
    if verbose:
        _print_startup_summary(
            dataset_name=dataset.name,
            n_samples=len(dataset.samples),
            dims=topology.dims(),
            activations=[spec.activation.value for spec in topology.iter_layers()],
            mentor_cfg=mentor_cfg,
        )

    jsonl = JsonlSink(run_dir / "metrics.jsonl", run=dataset.name, seed=mentor_cfg.seed)
    csv_sink = CsvSink(run_dir / "metrics.csv", run=dataset.name)
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))
    callbacks: list[object] = [jsonl, csv_sink, plots]
    if verbose:
        callbacks.append(ConsoleLogger(prefix=dataset.name))

    mentor = Mentor(topology, dataset.samples, mentor_cfg, callbacks=callbacks)
    result = mentor.train()
    plots.close()

    final_mse = result.network.mse(dataset.samples)
    resolved = _resolved_config(config, mentor_cfg)
    (run_dir / "config.json").write_text(json.dumps(resolved, indent=2))
    manifest = write_manifest(
        run_dir / "manifest.json",
        result,
        config=resolved,
        dataset_provenance=dataset.provenance,
        final_mse=final_mse,
    )
    summary_path = write_summary(
        jsonl.path, run_dir / "summary.json", result, final_mse=final_mse
    )

    return RunResult(
        epochs=result.epochs,
        reason=result.reason.value,
        mse=final_mse,
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        summary_path=summary_path,
    )


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def _resolved_config(config: Mapping[str, object], mentor_cfg: MentorConfig) -> Dict[str, Any]:
    copied = json.loads(json.dumps(config))
    extras = {
        key: value
        for key, value in copied.get("train", {}).items()
        if key in _PIPELINE_KEYS
    }
    copied["train"] = {**mentor_cfg.to_mapping(), **extras}
    return copied


def _print_startup_summary(
    *,
    dataset_name: str,
    n_samples: int,
    dims: Sequence[int],
    activations: Sequence[str],
    mentor_cfg: MentorConfig,
) -> None:
    criteria = ", ".join(
        f"{key}={value}" for c in mentor_cfg.criteria for key, value in c.to_mapping().items()
    )
    batch = "epoch" if mentor_cfg.batch_size is None else str(mentor_cfg.batch_size)
    print("=== mentornets run ===")
    print(f"Dataset       : {dataset_name} ({n_samples} samples)")
    print(f"Dimensions    : {list(dims)}")
    print(f"Activations   : {list(activations)}")
    print(f"Learning rate : {mentor_cfg.learning_rate}")
    print(f"Momentum      : {mentor_cfg.momentum}")
    print(f"Scheduling    : {mentor_cfg.scheduling.value}")  # type: ignore[union-attr]
    print(f"Batch size    : {batch}")
    print(f"Criteria      : {criteria or 'none'} (max_epochs={mentor_cfg.max_epochs})")
    print("======================")


__all__ = ["build_topology", "load_config_file", "load_preset", "merge_config", "presets", "run_pipeline"]
