"""Weight storage and gradient accumulation for fully connected layers."""

from __future__ import annotations

from typing import Tuple

import numpy as np

from ..errors import UnmatchingBufferSizes, UnmatchingMatrixShapes, ZeroSizedBuffer
from .buffers import BiasedSignalBuffer, UnbiasedErrorSignalBuffer, UnbiasedSignalBuffer
from .types import DTYPE, Array


def _check_dims(outputs: int, inputs: int, where: str) -> None:
    if outputs == 0 or inputs == 0:
        raise ZeroSizedBuffer().with_annotation(f"Occurred in {where}")


def _require(buffer: object, kind: type, role: str) -> None:
    if not isinstance(buffer, kind):
        raise TypeError(f"{role} must be a {kind.__name__}, got {type(buffer).__name__}")


class DeltaWeightsMatrix:
    """Accumulator for pending weight gradients.

    Besides the summed gradient it keeps the number of accumulated samples
    and the last applied update, which is the momentum state.
    """

    __slots__ = ("_gradient", "_previous", "_count")

    def __init__(self, outputs: int, inputs: int) -> None:
        _check_dims(outputs, inputs, "DeltaWeightsMatrix")
        shape = (int(outputs), int(inputs) + 1)
        self._gradient = np.zeros(shape, dtype=DTYPE)
        self._previous = np.zeros(shape, dtype=DTYPE)
        self._count = 0

    @property
    def shape(self) -> Tuple[int, int]:
        return self._gradient.shape  # type: ignore[return-value]

    @property
    def count(self) -> int:
        return self._count

    @property
    def data(self) -> Array:
        view = self._gradient.view()
        view.flags.writeable = False
        return view

    @property
    def previous(self) -> Array:
        view = self._previous.view()
        view.flags.writeable = False
        return view

    def accumulate(
        self, error_signal: UnbiasedErrorSignalBuffer, inputs: BiasedSignalBuffer
    ) -> None:
        """Add the outer product ``error_signal x inputs`` to the gradient."""

        _require(error_signal, UnbiasedErrorSignalBuffer, "error_signal")
        _require(inputs, BiasedSignalBuffer, "inputs")
        rows, cols = self._gradient.shape
        if error_signal.dim != rows:
            raise UnmatchingBufferSizes(rows, error_signal.dim).with_annotation(
                "Occurred in DeltaWeightsMatrix.accumulate (error signal)"
            )
        if inputs.dim != cols:
            raise UnmatchingBufferSizes(cols, inputs.dim).with_annotation(
                "Occurred in DeltaWeightsMatrix.accumulate (input signal)"
            )
        self._gradient += np.outer(error_signal.data, inputs.data)
        self._count += 1

    def reset(self) -> None:
        self._gradient.fill(0.0)
        self._count = 0

    def clear_momentum(self) -> None:
        self._previous.fill(0.0)


class WeightsMatrix:
    """Weights of shape ``(outputs, inputs + 1)``; the last column holds the bias weights."""

    __slots__ = ("_data",)

    def __init__(self, data: Array) -> None:
        self._data = data

    @classmethod
    def zeros(cls, outputs: int, inputs: int) -> "WeightsMatrix":
        _check_dims(outputs, inputs, "WeightsMatrix.zeros")
        return cls(np.zeros((int(outputs), int(inputs) + 1), dtype=DTYPE))

    @classmethod
    def random(
        cls, outputs: int, inputs: int, rng: np.random.Generator
    ) -> "WeightsMatrix":
        _check_dims(outputs, inputs, "WeightsMatrix.random")
        limit = 1.0 / np.sqrt(inputs + 1)
        values = rng.uniform(-limit, limit, size=(int(outputs), int(inputs) + 1))
        return cls(values.astype(DTYPE))

    @classmethod
    def from_raw(cls, values) -> "WeightsMatrix":
        data = np.array(values, dtype=DTYPE)
        if data.ndim != 2 or data.shape[1] < 2:
            raise UnmatchingMatrixShapes((-1, -1), data.shape).with_annotation(
                "WeightsMatrix.from_raw needs at least one input column plus the bias column"
            )
        if data.shape[0] == 0:
            raise ZeroSizedBuffer().with_annotation("Occurred in WeightsMatrix.from_raw")
        return cls(data)

    @property
    def shape(self) -> Tuple[int, int]:
        return self._data.shape  # type: ignore[return-value]

    @property
    def outputs(self) -> int:
        return int(self._data.shape[0])

    @property
    def inputs(self) -> int:
        return int(self._data.shape[1]) - 1

    @property
    def data(self) -> Array:
        view = self._data.view()
        view.flags.writeable = False
        return view

    def new_deltas(self) -> DeltaWeightsMatrix:
        return DeltaWeightsMatrix(self.outputs, self.inputs)

    def forward(
        self,
        inputs: BiasedSignalBuffer,
        out: UnbiasedSignalBuffer | None = None,
    ) -> UnbiasedSignalBuffer:
        """Multiply the weights with the biased ``inputs``.

        The result has ``outputs`` values.  When ``out`` is given the product
        is written into it and it is returned.
        """

        _require(inputs, BiasedSignalBuffer, "inputs")
        rows, cols = self._data.shape
        if inputs.dim != cols:
            raise UnmatchingBufferSizes(cols, inputs.dim).with_annotation(
                "Occurred in WeightsMatrix.forward"
            )
        if out is None:
            out = UnbiasedSignalBuffer.zeros(rows)
        _require(out, UnbiasedSignalBuffer, "out")
        if out.dim != rows:
            raise UnmatchingBufferSizes(rows, out.dim).with_annotation(
                "Occurred in WeightsMatrix.forward (output)"
            )
        np.matmul(self._data, inputs.data, out=out.data_mut)
        return out

    def backward(
        self,
        error_signal: UnbiasedErrorSignalBuffer,
        out: UnbiasedErrorSignalBuffer | None = None,
    ) -> UnbiasedErrorSignalBuffer:
        """Propagate ``error_signal`` through the non-bias columns."""

        _require(error_signal, UnbiasedErrorSignalBuffer, "error_signal")
        rows, cols = self._data.shape
        if error_signal.dim != rows:
            raise UnmatchingBufferSizes(rows, error_signal.dim).with_annotation(
                "Occurred in WeightsMatrix.backward"
            )
        if out is None:
            out = UnbiasedErrorSignalBuffer.zeros(cols - 1)
        _require(out, UnbiasedErrorSignalBuffer, "out")
        if out.dim != cols - 1:
            raise UnmatchingBufferSizes(cols - 1, out.dim).with_annotation(
                "Occurred in WeightsMatrix.backward (output)"
            )
        np.matmul(error_signal.data, self._data[:, :-1], out=out.data_mut)
        return out

    def apply_deltas(
        self,
        deltas: DeltaWeightsMatrix,
        learning_rate: float,
        momentum: float = 0.0,
        *,
        retain_momentum: bool = True,
    ) -> None:
        """Apply ``learning_rate * mean_gradient + momentum * previous_update``.

        The accumulated gradient is reset afterwards.  The applied update is
        kept as the next momentum term unless ``retain_momentum`` is false.
        """

        if deltas.shape != self.shape:
            raise UnmatchingMatrixShapes(self.shape, deltas.shape).with_annotation(
                "Occurred in WeightsMatrix.apply_deltas"
            )
        update = deltas._previous
        update *= momentum
        if deltas._count:
            update += (learning_rate / deltas._count) * deltas._gradient
        self._data += update
        if not retain_momentum:
            update.fill(0.0)
        deltas.reset()


__all__ = ["WeightsMatrix", "DeltaWeightsMatrix"]
