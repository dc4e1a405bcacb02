"""mentornets public API."""

from .core import activations  # noqa: F401
from .core import types  # noqa: F401
from .core.activations import Activation
from .core.buffers import (
    BiasedErrorSignalBuffer,
    BiasedSignalBuffer,
    UnbiasedErrorSignalBuffer,
    UnbiasedSignalBuffer,
)
from .core.layers import ActivationLayer, FullyConnectedLayer
from .core.matrices import DeltaWeightsMatrix, WeightsMatrix
from .core.network import NeuralNet
from .errors import (
    ConfigurationError,
    ImmutableBuffer,
    MentorNetsError,
    TooFewValues,
    UnmatchingBiasValue,
    UnmatchingBufferSizes,
    UnmatchingMatrixShapes,
    ZeroSizedBuffer,
)
from .topology import Topology
from .training import (
    Criterion,
    LearningRate,
    LogConfig,
    Mentor,
    MentorConfig,
    Sample,
    SampleCollection,
    Scheduling,
    StopReason,
)
from .training.pipelines import load_preset, presets, run_pipeline

__all__ = [
    "Activation",
    "ActivationLayer",
    "BiasedErrorSignalBuffer",
    "BiasedSignalBuffer",
    "ConfigurationError",
    "Criterion",
    "DeltaWeightsMatrix",
    "FullyConnectedLayer",
    "ImmutableBuffer",
    "LearningRate",
    "LogConfig",
    "Mentor",
    "MentorConfig",
    "MentorNetsError",
    "NeuralNet",
    "Sample",
    "SampleCollection",
    "Scheduling",
    "StopReason",
    "TooFewValues",
    "Topology",
    "UnbiasedErrorSignalBuffer",
    "UnbiasedSignalBuffer",
    "UnmatchingBiasValue",
    "UnmatchingBufferSizes",
    "UnmatchingMatrixShapes",
    "WeightsMatrix",
    "ZeroSizedBuffer",
    "activations",
    "load_preset",
    "presets",
    "run_pipeline",
    "types",
]
