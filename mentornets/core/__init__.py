"""Core numerical primitives for mentornets."""

from . import activations, buffers, layers, matrices, network, types

__all__ = ["activations", "buffers", "layers", "matrices", "network", "types"]
