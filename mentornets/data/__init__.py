"""Sample sources for mentornets."""

from . import builtin  # noqa: F401  (registers the builtin datasets)
from .registry import DatasetSpec, available_datasets, get_dataset, register_dataset

__all__ = ["DatasetSpec", "available_datasets", "get_dataset", "register_dataset"]
