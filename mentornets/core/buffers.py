"""Bias-aware one dimensional buffers.

Four concrete buffer types share one representation, a flat ``float32``
numpy array:

* :class:`BiasedSignalBuffer` -- trailing bias slot fixed at ``1.0``
* :class:`UnbiasedSignalBuffer`
* :class:`BiasedErrorSignalBuffer` -- trailing bias slot fixed at ``0.0``
* :class:`UnbiasedErrorSignalBuffer`

The type is the tag: a signal can never be passed where an error signal is
expected, and biased buffers only hand out their trailing bias slot through
read-only accessors, so the bias value cannot drift once a buffer exists.

A buffer either owns its array or is a *view* that borrows a numpy view of
another buffer's storage.  Views created with :meth:`view` are read-only;
views created with :meth:`view_mut` and :meth:`unbias_mut` are writeable and
are only held for the duration of a single propagation step.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Type, TypeVar

import numpy as np

from ..errors import (
    ImmutableBuffer,
    TooFewValues,
    UnmatchingBiasValue,
    UnmatchingBufferSizes,
    ZeroSizedBuffer,
)
from .types import DTYPE, Array

B = TypeVar("B", bound="_BufferBase")


def _as_array(values: Iterable[float] | Array) -> Array:
    data = np.asarray(values, dtype=DTYPE)
    if data.ndim != 1:
        raise ValueError(f"Buffers are one dimensional, got shape {data.shape}")
    return data


def _check_length(length: int, where: str) -> int:
    if length < 0:
        raise ValueError(f"buffer length must not be negative, got {length} ({where})")
    if length == 0:
        raise ZeroSizedBuffer().with_annotation(where)
    return int(length)


def _readonly(data: Array) -> Array:
    view = data.view()
    view.flags.writeable = False
    return view


class _BufferBase:
    __slots__ = ("_data",)

    def __init__(self, data: Array) -> None:
        self._data = data

    @classmethod
    def _wrap(cls: Type[B], data: Array) -> B:
        return cls(data)

    # ------------------------------------------------------------------
    # Accessors

    @property
    def dim(self) -> int:
        return int(self._data.shape[0])

    def __len__(self) -> int:
        return self.dim

    def __iter__(self) -> Iterator[float]:
        return iter(self._data.tolist())

    def __array__(self, dtype=None, copy=None) -> Array:
        return np.array(self._data, dtype=dtype)

    @property
    def data(self) -> Array:
        """Read-only numpy view over every element, bias slot included."""

        return _readonly(self._data)

    @property
    def is_view(self) -> bool:
        return self._data.base is not None

    @property
    def is_mutable(self) -> bool:
        return bool(self._data.flags.writeable)

    def view(self: B) -> B:
        return self._wrap(_readonly(self._data))

    def view_mut(self: B) -> B:
        self._require_mutable("view_mut")
        return self._wrap(self._data.view())

    def copy(self: B) -> B:
        return self._wrap(self._data.copy())

    def _require_mutable(self, operation: str) -> None:
        if not self._data.flags.writeable:
            raise ImmutableBuffer().with_annotation(
                f"Occurred in {type(self).__name__}.{operation}"
            )

    # ------------------------------------------------------------------
    # Comparison

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, _BufferBase):
            return NotImplemented
        return bool(np.array_equal(self._data, other._data))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data.tolist()!r})"


class _Unbiased(_BufferBase):
    __slots__ = ()

    @classmethod
    def from_raw(cls: Type[B], values: Iterable[float] | Array) -> B:
        """Wrap ``values`` without a bias slot.

        A one dimensional ``float32`` array is wrapped without copying.
        """

        data = _as_array(values)
        if data.shape[0] == 0:
            raise ZeroSizedBuffer().with_annotation(f"Occurred in {cls.__name__}.from_raw")
        return cls._wrap(data)

    @classmethod
    def zeros(cls: Type[B], length: int) -> B:
        length = _check_length(length, f"Occurred in {cls.__name__}.zeros")
        return cls._wrap(np.zeros(length, dtype=DTYPE))

    @property
    def data_mut(self) -> Array:
        self._require_mutable("data_mut")
        return self._data.view()

    def assign(self, other: "_Unbiased") -> None:
        """Copy the values of ``other`` into this buffer."""

        if type(other) is not type(self):
            raise TypeError(
                f"Cannot assign {type(other).__name__} to {type(self).__name__}"
            )
        self._require_mutable("assign")
        if self.dim != other.dim:
            raise UnmatchingBufferSizes(self.dim, other.dim).with_annotation(
                "Occurred in unbiased buffer assign"
            )
        self._data[...] = other._data

    def _payload(self) -> Array:
        return self._data


class _Biased(_BufferBase):
    __slots__ = ()

    BIAS_VALUE: float = 0.0
    UNBIASED: Type[_Unbiased] = _Unbiased

    @classmethod
    def from_raw_with_bias(cls: Type[B], values: Iterable[float] | Array) -> B:
        """Copy ``values`` whose last element is the bias value.

        Unlike :meth:`from_raw` this always copies, so the caller cannot
        change the bias slot afterwards.
        """

        data = _as_array(values)
        where = f"Occurred in {cls.__name__}.from_raw_with_bias"
        if data.shape[0] == 0:
            raise ZeroSizedBuffer().with_annotation(where)
        if data.shape[0] == 1:
            raise TooFewValues(2, 1).with_annotation(where)
        if data[-1] != cls.BIAS_VALUE:
            raise UnmatchingBiasValue(cls.BIAS_VALUE, float(data[-1])).with_annotation(where)
        return cls._wrap(data.copy())

    @classmethod
    def zeros_with_bias(cls: Type[B], length: int) -> B:
        """Return ``length`` zeros followed by the bias value."""

        length = _check_length(length, f"Occurred in {cls.__name__}.zeros_with_bias")
        data = np.zeros(length + 1, dtype=DTYPE)
        data[-1] = cls.BIAS_VALUE
        return cls._wrap(data)

    @property
    def bias(self) -> float:
        return float(self._data[-1])

    def unbias(self) -> _Unbiased:
        """Read-only view over all elements except the bias slot."""

        return self.UNBIASED._wrap(_readonly(self._data[:-1]))

    def unbias_mut(self) -> _Unbiased:
        """Writeable view over all elements except the bias slot."""

        self._require_mutable("unbias_mut")
        return self.UNBIASED._wrap(self._data[:-1])

    def _payload(self) -> Array:
        return self._data[:-1]


class _ErrorSignal:
    __slots__ = ()

    def reset_to_zeros(self) -> None:
        """Zero every value; a bias slot keeps its fixed ``0.0``."""

        self._require_mutable("reset_to_zeros")  # type: ignore[attr-defined]
        self._payload().fill(0.0)  # type: ignore[attr-defined]


class UnbiasedSignalBuffer(_Unbiased):
    __slots__ = ()


class UnbiasedErrorSignalBuffer(_ErrorSignal, _Unbiased):
    __slots__ = ()


class BiasedSignalBuffer(_Biased):
    __slots__ = ()

    BIAS_VALUE = 1.0
    UNBIASED = UnbiasedSignalBuffer


class BiasedErrorSignalBuffer(_ErrorSignal, _Biased):
    __slots__ = ()

    BIAS_VALUE = 0.0
    UNBIASED = UnbiasedErrorSignalBuffer


__all__ = [
    "BiasedSignalBuffer",
    "UnbiasedSignalBuffer",
    "BiasedErrorSignalBuffer",
    "UnbiasedErrorSignalBuffer",
]
