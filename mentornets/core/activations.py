"""Activation functions for mentornets.

Every derivative is expressed in terms of the activation's *output*, so a
layer can evaluate it from the signal it already computed during the
forward pass instead of keeping the raw weighted sums around.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict

import numpy as np

from .types import Array


def identity(x: Array) -> Array:
    return x.copy()


def binary_step(x: Array) -> Array:
    return (x >= 0.0).astype(x.dtype)


def logistic(x: Array) -> Array:
    """Return the logistic sigmoid, computed via ``tanh`` to avoid overflow."""

    return 0.5 * (1.0 + np.tanh(0.5 * x))


def tanh(x: Array) -> Array:
    return np.tanh(x)


def arctan(x: Array) -> Array:
    return np.arctan(x)


def softsign(x: Array) -> Array:
    return x / (1.0 + np.abs(x))


def relu(x: Array) -> Array:
    """Return the ReLU activation."""

    return np.maximum(x, 0.0)


def softplus(x: Array) -> Array:
    return np.logaddexp(0.0, x).astype(x.dtype)


_DERIVATIVES: Dict[str, Callable[[Array], Array]] = {
    "identity": np.ones_like,
    "binary_step": np.zeros_like,
    "logistic": lambda y: y * (1.0 - y),
    "tanh": lambda y: 1.0 - y * y,
    "arctan": lambda y: np.cos(y) ** 2,
    "softsign": lambda y: (1.0 - np.abs(y)) ** 2,
    "relu": lambda y: (y > 0.0).astype(y.dtype),
    "softplus": lambda y: -np.expm1(-y),
}

_FUNCTIONS: Dict[str, Callable[[Array], Array]] = {
    "identity": identity,
    "binary_step": binary_step,
    "logistic": logistic,
    "tanh": tanh,
    "arctan": arctan,
    "softsign": softsign,
    "relu": relu,
    "softplus": softplus,
}

_ALIASES: Dict[str, str] = {
    "linear": "identity",
    "sigmoid": "logistic",
    "step": "binary_step",
    "atan": "arctan",
}


class Activation(str, Enum):
    """Named activation function with its output-based derivative."""

    IDENTITY = "identity"
    BINARY_STEP = "binary_step"
    LOGISTIC = "logistic"
    TANH = "tanh"
    ARCTAN = "arctan"
    SOFTSIGN = "softsign"
    RELU = "relu"
    SOFTPLUS = "softplus"

    def apply(self, x: Array) -> Array:
        return _FUNCTIONS[self.value](x)

    def derivative(self, y: Array) -> Array:
        """Derivative at the point whose activation output is ``y``."""

        return _DERIVATIVES[self.value](y)

    @classmethod
    def from_name(cls, name: "str | Activation") -> "Activation":
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower().replace("-", "_")
        key = _ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError as exc:
            available = ", ".join(member.value for member in cls)
            raise ValueError(
                f"Unknown activation {name!r}. Available activations: {available}"
            ) from exc


__all__ = [
    "Activation",
    "identity",
    "binary_step",
    "logistic",
    "tanh",
    "arctan",
    "softsign",
    "relu",
    "softplus",
]
