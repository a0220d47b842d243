"""Runtime context injected into adapter processes.

The runtime writes an ephemeral JSON file holding the channel, account,
adapter configuration and resolved credential, and passes its path through
the ``NEXUS_ADAPTER_CONTEXT_PATH`` environment variable.

File shape::

    {
      "version": 1,
      "channel": "discord",
      "account_id": "default",
      "config": {...},
      "credential": {"kind": "token", "value": "..."}
    }

Legacy injections carry ``{ref, service, account, value}`` without ``kind``;
those credentials are normalized to ``kind="token"``.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .core.exceptions import RuntimeContextError

ADAPTER_CONTEXT_ENV_VAR = "NEXUS_ADAPTER_CONTEXT_PATH"

DEFAULT_CREDENTIAL_KIND = "token"


class RuntimeCredential(BaseModel):
    """Resolved plaintext credential."""

    model_config = ConfigDict(frozen=True, extra="allow")

    kind: str = DEFAULT_CREDENTIAL_KIND
    value: str = Field(..., min_length=1)

    # Identity fields carried by legacy injections
    ref: str | None = None
    service: str | None = None
    account: str | None = None

    @field_validator("kind", mode="before")
    @classmethod
    def default_kind(cls, v: Any) -> Any:
        """Empty kind falls back to a token credential."""
        return v or DEFAULT_CREDENTIAL_KIND

    def __repr__(self) -> str:
        return f"RuntimeCredential(kind={self.kind!r}, value='***')"

    __str__ = __repr__


class RuntimeContext(BaseModel):
    """Configuration and credential for one adapter invocation."""

    model_config = ConfigDict(frozen=True, extra="allow")

    version: int | None = None
    channel: str = Field(..., min_length=1)
    account_id: str = Field(..., min_length=1)
    config: dict[str, Any] = Field(default_factory=dict)
    credential: RuntimeCredential | None = None

    @field_validator("config", mode="before")
    @classmethod
    def default_config(cls, v: Any) -> Any:
        return {} if v is None else v

    def config_value(self, key: str, default: Any = None) -> Any:
        """Look up one adapter configuration value."""
        return self.config.get(key, default)


def parse_runtime_context(data: Mapping[str, Any]) -> RuntimeContext:
    """Validate a decoded runtime context document.

    Raises:
        RuntimeContextError: If required fields are missing or invalid
    """
    try:
        return RuntimeContext.model_validate(data)
    except ValidationError as e:
        raise RuntimeContextError(f"invalid runtime context: {e}") from e


def load_runtime_context_file(path: str | os.PathLike[str]) -> RuntimeContext:
    """Read and validate a runtime context JSON file.

    Raises:
        RuntimeContextError: If the file cannot be read, is not valid JSON or
            does not match the runtime context shape
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise RuntimeContextError(f"read runtime context: {e}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise RuntimeContextError(f"parse runtime context json: {e}") from e

    if not isinstance(data, dict):
        raise RuntimeContextError("runtime context must be a JSON object")
    return parse_runtime_context(data)


def load_runtime_context_from_env(env: Mapping[str, str] | None = None) -> RuntimeContext | None:
    """Load the runtime context named by ``NEXUS_ADAPTER_CONTEXT_PATH``.

    Returns:
        RuntimeContext, or None when the variable is unset or blank
    """
    environ = os.environ if env is None else env
    path = (environ.get(ADAPTER_CONTEXT_ENV_VAR) or "").strip()
    if not path:
        return None
    return load_runtime_context_file(path)


def require_runtime_context(env: Mapping[str, str] | None = None) -> RuntimeContext:
    """Like ``load_runtime_context_from_env`` but a missing variable is an error."""
    context = load_runtime_context_from_env(env)
    if context is None:
        raise RuntimeContextError(
            f"missing adapter runtime context (expected ${ADAPTER_CONTEXT_ENV_VAR} "
            "to point at runtime-context.json)"
        )
    return context
