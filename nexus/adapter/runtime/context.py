"""Per-command context handed to adapter handlers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..config import RuntimeContext
from ..io.jsonl import JSONLWriter
from .cancellation import CancellationSignal


@dataclass
class AdapterContext:
    """Everything a handler needs besides its arguments.

    Attributes:
        cancel: Raised on SIGINT/SIGTERM; long-running handlers should stop
            when it is set
        logger: Logger writing to stderr
        runtime: Injected runtime context (None for ``info`` or when optional)
        writer: Protocol output writer (stdout)
    """

    cancel: CancellationSignal = field(default_factory=CancellationSignal)
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("nexus.adapter"))
    runtime: RuntimeContext | None = None
    writer: JSONLWriter = field(default_factory=JSONLWriter)
