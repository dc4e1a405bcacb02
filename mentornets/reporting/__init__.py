"""Reporting utilities for mentornets."""

from .artifacts import write_manifest
from .metrics import ConsoleLogger, CsvSink, JsonlSink
from .plots import PlotAdapter
from .summary import write_summary

__all__ = ["write_manifest", "ConsoleLogger", "CsvSink", "JsonlSink", "PlotAdapter", "write_summary"]
