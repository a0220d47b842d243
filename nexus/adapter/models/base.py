"""Shared base class for wire models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class WireModel(BaseModel):
    """Immutable pydantic model that serializes to the protocol's JSON shape.

    Optional fields left unset are omitted on the wire and camelCase aliases
    are used where the protocol defines them.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-compatible dict written to the protocol stream."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
