"""The two layer variants a network is assembled from.

A :class:`FullyConnectedLayer` owns weights and gradient deltas; an
:class:`ActivationLayer` owns no weights and applies an element-wise
nonlinearity.  Both own a biased output signal and a biased error signal of
their output size, preallocated once and overwritten on every pass.
"""

from __future__ import annotations

from typing import Protocol, Union

import numpy as np

from .activations import Activation
from .buffers import BiasedErrorSignalBuffer, BiasedSignalBuffer
from .matrices import WeightsMatrix


class Layer(Protocol):
    """Protocol shared by the layer variants."""

    kind: str
    output: BiasedSignalBuffer
    error_signal: BiasedErrorSignalBuffer

    @property
    def len_input(self) -> int: ...

    @property
    def len_output(self) -> int: ...

    def forward(self, inputs: BiasedSignalBuffer) -> BiasedSignalBuffer:
        """Propagate ``inputs`` and return a read-only view of the output."""

    def backward(self, prev_error: BiasedErrorSignalBuffer | None = None) -> None:
        """Propagate this layer's error signal into ``prev_error``."""

    def apply_deltas(
        self, learning_rate: float, momentum: float = 0.0, *, retain_momentum: bool = True
    ) -> None:
        """Apply pending weight updates, if the layer has weights."""


class FullyConnectedLayer:
    kind = "fully_connected"

    def __init__(self, weights: WeightsMatrix) -> None:
        self.weights = weights
        self.deltas = weights.new_deltas()
        self.output = BiasedSignalBuffer.zeros_with_bias(weights.outputs)
        self.error_signal = BiasedErrorSignalBuffer.zeros_with_bias(weights.outputs)
        self._last_input: BiasedSignalBuffer | None = None

    @classmethod
    def random(
        cls, inputs: int, outputs: int, rng: np.random.Generator
    ) -> "FullyConnectedLayer":
        return cls(WeightsMatrix.random(outputs, inputs, rng))

    @property
    def len_input(self) -> int:
        return self.weights.inputs

    @property
    def len_output(self) -> int:
        return self.weights.outputs

    def forward(self, inputs: BiasedSignalBuffer) -> BiasedSignalBuffer:
        # Cached until the matching backward call; the previous layer does not
        # overwrite its output before then.
        self._last_input = inputs.view()
        self.weights.forward(inputs, out=self.output.unbias_mut())
        return self.output.view()

    def backward(self, prev_error: BiasedErrorSignalBuffer | None = None) -> None:
        if self._last_input is None:
            raise RuntimeError("backward called before forward")
        error = self.error_signal.unbias()
        self.deltas.accumulate(error, self._last_input)
        if prev_error is not None:
            self.weights.backward(error, out=prev_error.unbias_mut())

    def apply_deltas(
        self, learning_rate: float, momentum: float = 0.0, *, retain_momentum: bool = True
    ) -> None:
        self.weights.apply_deltas(
            self.deltas, learning_rate, momentum, retain_momentum=retain_momentum
        )

    def reset(self) -> None:
        self.deltas.reset()
        self.deltas.clear_momentum()
        self.error_signal.reset_to_zeros()
        self._last_input = None

    def parameter_count(self) -> int:
        rows, cols = self.weights.shape
        return rows * cols

    def __repr__(self) -> str:
        return f"FullyConnectedLayer(inputs={self.len_input}, outputs={self.len_output})"


class ActivationLayer:
    kind = "activation"

    def __init__(self, size: int, activation: Activation | str) -> None:
        self.activation = Activation.from_name(activation)
        self.output = BiasedSignalBuffer.zeros_with_bias(size)
        self.error_signal = BiasedErrorSignalBuffer.zeros_with_bias(size)

    @property
    def len_input(self) -> int:
        return self.output.dim - 1

    @property
    def len_output(self) -> int:
        return self.output.dim - 1

    def forward(self, inputs: BiasedSignalBuffer) -> BiasedSignalBuffer:
        self.output.unbias_mut().data_mut[...] = self.activation.apply(inputs.unbias().data)
        return self.output.view()

    def backward(self, prev_error: BiasedErrorSignalBuffer | None = None) -> None:
        if prev_error is None:
            return
        derivative = self.activation.derivative(self.output.unbias().data)
        np.multiply(
            self.error_signal.unbias().data,
            derivative,
            out=prev_error.unbias_mut().data_mut,
        )

    def apply_deltas(
        self, learning_rate: float, momentum: float = 0.0, *, retain_momentum: bool = True
    ) -> None:
        return None

    def reset(self) -> None:
        self.error_signal.reset_to_zeros()

    def parameter_count(self) -> int:
        return 0

    def __repr__(self) -> str:
        return f"ActivationLayer(size={self.len_output}, activation={self.activation.value!r})"


AnyLayer = Union[FullyConnectedLayer, ActivationLayer]

__all__ = ["Layer", "AnyLayer", "FullyConnectedLayer", "ActivationLayer"]
