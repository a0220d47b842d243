"""Adapter command-line runner."""

from .definition import Adapter
from .runner import RunOptions, build_parser, parse_date, run, run_adapter, run_adapter_async

__all__ = [
    "Adapter",
    "RunOptions",
    "build_parser",
    "parse_date",
    "run",
    "run_adapter",
    "run_adapter_async",
]
