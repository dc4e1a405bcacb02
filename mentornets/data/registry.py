"""Registry of named sample sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, MutableMapping

from ..training.samples import SampleCollection


@dataclass(frozen=True)
class DatasetSpec:
    """A named, validated sample collection plus its provenance."""

    name: str
    samples: SampleCollection
    provenance: Dict[str, Any]

    @property
    def len_input(self) -> int:
        return self.samples.len_input

    @property
    def len_output(self) -> int:
        return self.samples.len_output


DatasetFactory = Callable[..., DatasetSpec]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory.

    ``register_dataset`` can be used both as a decorator::

        @register_dataset("xor")
        def make_xor(**options):
            ...

    or directly::

        register_dataset("xor", make_xor)
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    return _decorator


def get_dataset(name: str, /, **options: Any) -> DatasetSpec:
    """Build the dataset registered as ``name`` with ``options``."""

    if name not in _REGISTRY:
        available = ", ".join(available_datasets())
        raise KeyError(f"Unknown dataset {name!r}. Available datasets: {available}")
    spec = _REGISTRY[name](**options)
    if not isinstance(spec, DatasetSpec):
        raise TypeError(f"Dataset factory {name!r} must return a DatasetSpec")
    return spec


def available_datasets() -> Iterable[str]:
    """Return the sorted list of available dataset identifiers."""

    return sorted(_REGISTRY)


__all__ = ["DatasetSpec", "available_datasets", "get_dataset", "register_dataset"]
