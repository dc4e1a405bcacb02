"""The immutable layer chain of a feed-forward network."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Sequence, Tuple

import numpy as np

from ..errors import ConfigurationError, UnmatchingBufferSizes
from .buffers import BiasedSignalBuffer, UnbiasedSignalBuffer
from .layers import ActivationLayer, AnyLayer, FullyConnectedLayer
from .types import DTYPE, Array, ModelDescription

if TYPE_CHECKING:  # pragma: no cover
    from ..topology import Topology


class NeuralNet:
    """A fixed chain of layers usable for training and inference.

    Each topology layer becomes a :class:`FullyConnectedLayer` followed by an
    :class:`ActivationLayer`.  Shapes of adjacent layers are validated once,
    here; propagation relies on them.
    """

    def __init__(self, layers: Sequence[AnyLayer]) -> None:
        if not layers:
            raise ConfigurationError("a network needs at least one layer")
        for prev, layer in zip(layers[:-1], layers[1:]):
            if prev.len_output != layer.len_input:
                raise ConfigurationError(
                    f"{layer!r} expects {layer.len_input} inputs "
                    f"but {prev!r} produces {prev.len_output}"
                )
        self._layers: Tuple[AnyLayer, ...] = tuple(layers)
        self._input = BiasedSignalBuffer.zeros_with_bias(self._layers[0].len_input)

    @classmethod
    def from_topology(
        cls, topology: Topology, rng: np.random.Generator | None = None
    ) -> "NeuralNet":
        rng = rng if rng is not None else np.random.default_rng(0)
        layers: list[AnyLayer] = []
        for spec in topology.iter_layers():
            layers.append(FullyConnectedLayer.random(spec.inputs, spec.outputs, rng))
            layers.append(ActivationLayer(spec.outputs, spec.activation))
        return cls(layers)

    @property
    def layers(self) -> Tuple[AnyLayer, ...]:
        return self._layers

    @property
    def len_input(self) -> int:
        return self._layers[0].len_input

    @property
    def len_output(self) -> int:
        return self._layers[-1].len_output

    # ------------------------------------------------------------------
    # Propagation

    def forward(self, inputs: UnbiasedSignalBuffer | Array | Sequence[float]) -> UnbiasedSignalBuffer:
        """Propagate ``inputs`` and return a read-only view of the output signal."""

        if not isinstance(inputs, UnbiasedSignalBuffer):
            inputs = UnbiasedSignalBuffer.from_raw(inputs)
        if inputs.dim != self.len_input:
            raise UnmatchingBufferSizes(self.len_input, inputs.dim).with_annotation(
                "Occurred in NeuralNet.forward"
            )
        self._input.unbias_mut().assign(inputs)
        signal = self._input.view()
        for layer in self._layers:
            signal = layer.forward(signal)
        return signal.unbias()

    def predict(self, inputs: UnbiasedSignalBuffer | Array | Sequence[float]) -> Array:
        return np.array(self.forward(inputs).data)

    def backward(self, target: Array | Sequence[float]) -> Array:
        """Backpropagate ``target - output`` for the last forward pass.

        Weight deltas are accumulated in every fully connected layer; they are
        applied separately with :meth:`apply_deltas`.  Returns a copy of the
        output error.
        """

        target = np.asarray(target, dtype=DTYPE)
        top = self._layers[-1]
        if target.shape != (self.len_output,):
            raise UnmatchingBufferSizes(self.len_output, int(target.size)).with_annotation(
                "Occurred in NeuralNet.backward"
            )
        error = top.error_signal.unbias_mut().data_mut
        np.subtract(target, top.output.unbias().data, out=error)
        for idx in range(len(self._layers) - 1, -1, -1):
            prev_error = self._layers[idx - 1].error_signal.view_mut() if idx else None
            self._layers[idx].backward(prev_error)
        return error.copy()

    def apply_deltas(
        self, learning_rate: float, momentum: float = 0.0, *, retain_momentum: bool = True
    ) -> None:
        for layer in self._layers:
            layer.apply_deltas(learning_rate, momentum, retain_momentum=retain_momentum)

    def reset(self) -> None:
        """Drop pending deltas, momentum and error signals."""

        for layer in self._layers:
            layer.reset()

    # ------------------------------------------------------------------
    # Introspection

    def mse(self, samples: Iterable[object]) -> float:
        """Mean squared error of the network over ``samples``.

        ``samples`` yields objects with ``input``/``target`` attributes or
        ``(input, target)`` pairs.
        """

        errors = []
        for sample in samples:
            if hasattr(sample, "input"):
                inputs, target = sample.input, sample.target  # type: ignore[attr-defined]
            else:
                inputs, target = sample  # type: ignore[misc]
            output = self.forward(inputs).data
            diff = np.asarray(target, dtype=np.float64) - output
            errors.append(float(np.mean(np.square(diff))))
        if not errors:
            raise ValueError("cannot compute the error of an empty sample set")
        return float(np.mean(errors))

    def fully_connected(self) -> Tuple[FullyConnectedLayer, ...]:
        return tuple(layer for layer in self._layers if isinstance(layer, FullyConnectedLayer))

    def parameter_count(self) -> int:
        return int(sum(layer.parameter_count() for layer in self._layers))

    def describe(self) -> ModelDescription:
        dims = [self.len_input]
        activations = []
        for layer in self._layers:
            if isinstance(layer, ActivationLayer):
                dims.append(layer.len_output)
                activations.append(layer.activation.value)
        return ModelDescription(layer_dims=dims, activations=activations)

    def __repr__(self) -> str:
        desc = self.describe()
        return f"NeuralNet(dims={desc.layer_dims}, activations={desc.activations})"


__all__ = ["NeuralNet"]
