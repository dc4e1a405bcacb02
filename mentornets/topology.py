"""Fluent builder for feed-forward network topologies.

Example::

    topology = (
        Topology.input(2)
        .layer(5, Activation.LOGISTIC)
        .layers([(10, Activation.IDENTITY), (10, Activation.RELU)])
        .output(5, Activation.TANH)
    )

Bias neurons are added implicitly and are not counted in any size.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Sequence, Tuple

from .core.activations import Activation


@dataclass(frozen=True)
class LayerSpec:
    """A fully connected layer with its activation function."""

    inputs: int
    outputs: int
    activation: Activation


@dataclass(frozen=True)
class Topology:
    """Validated, immutable sequence of layer specs."""

    layer_specs: Tuple[LayerSpec, ...]

    @staticmethod
    def input(size: int) -> "TopologyBuilder":
        if size < 1:
            raise ValueError("cannot define a zero-sized input layer")
        return TopologyBuilder(last=int(size))

    @classmethod
    def from_dims(
        cls,
        dims: Sequence[int],
        hidden: Activation | str = Activation.TANH,
        output: Activation | str = Activation.IDENTITY,
    ) -> "Topology":
        """Build a topology from ``[d_in, h1, ..., d_out]`` layer sizes."""

        if len(dims) < 2:
            raise ValueError("a topology needs at least an input and an output size")
        builder = cls.input(int(dims[0]))
        for size in dims[1:-1]:
            builder = builder.layer(int(size), hidden)
        return builder.output(int(dims[-1]), output)

    def len_input(self) -> int:
        return self.layer_specs[0].inputs

    def len_output(self) -> int:
        return self.layer_specs[-1].outputs

    def iter_layers(self) -> Iterator[LayerSpec]:
        return iter(self.layer_specs)

    def dims(self) -> List[int]:
        return [self.len_input()] + [spec.outputs for spec in self.layer_specs]

    def __len__(self) -> int:
        return len(self.layer_specs)


@dataclass
class TopologyBuilder:
    last: int
    specs: List[LayerSpec] = field(default_factory=list)

    def _push(self, size: int, activation: Activation | str, what: str) -> None:
        if size < 1:
            raise ValueError(f"cannot define a zero-sized {what} layer")
        self.specs.append(LayerSpec(self.last, int(size), Activation.from_name(activation)))
        self.last = int(size)

    def layer(self, size: int, activation: Activation | str) -> "TopologyBuilder":
        self._push(size, activation, "hidden")
        return self

    def layers(
        self, layers: Iterable[Tuple[int, Activation | str]]
    ) -> "TopologyBuilder":
        for size, activation in layers:
            self._push(size, activation, "hidden")
        return self

    def output(self, size: int, activation: Activation | str) -> Topology:
        self._push(size, activation, "output")
        return Topology(tuple(self.specs))


__all__ = ["LayerSpec", "Topology", "TopologyBuilder"]
