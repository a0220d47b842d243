"""Utility helpers."""

from .aio import maybe_await
from .logging import configure_logging

__all__ = ["configure_logging", "maybe_await"]
