"""Adapter-facing builders."""

from .event_builder import EventBuilder, new_event

__all__ = ["EventBuilder", "new_event"]
