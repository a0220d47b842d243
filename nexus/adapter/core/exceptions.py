"""Custom exception hierarchy."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .enums import DeliveryErrorType

if TYPE_CHECKING:
    from ..models.delivery import DeliveryError


class AdapterError(Exception):
    """Base exception for all SDK errors."""

    pass


class ProtocolError(AdapterError):
    """Malformed data on the adapter wire protocol."""

    pass


class RuntimeContextError(AdapterError):
    """Runtime context file is missing or invalid."""

    pass


class UnsupportedCommandError(AdapterError):
    """Adapter does not implement the requested command."""

    def __init__(self, command: str) -> None:
        super().__init__(f"{command} not supported by this adapter")
        self.command = command


class MonitorError(AdapterError):
    """Poll monitor gave up after too many consecutive fetch failures."""

    def __init__(self, message: str, consecutive_failures: int = 0) -> None:
        super().__init__(message)
        self.consecutive_failures = consecutive_failures


class DeliveryFailure(AdapterError):
    """Failure to deliver a message to the external channel.

    Platform send functions raise subclasses of this error to tell the
    delivery coordinator how the failure should be classified. Any other
    exception raised by a send function is treated as a transient network
    failure.
    """

    error_type: DeliveryErrorType = DeliveryErrorType.UNKNOWN

    def __init__(
        self,
        message: str,
        *,
        retry: bool | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.retry = self.error_type.retryable if retry is None else retry
        self.details = details

    def to_delivery_error(self) -> DeliveryError:
        """Convert into the wire-level DeliveryError record."""
        from ..models.delivery import DeliveryError

        return DeliveryError(
            type=self.error_type,
            message=str(self),
            retry=self.retry,
            details=self.details,
        )


class NetworkError(DeliveryFailure):
    """Transient transport failure."""

    error_type = DeliveryErrorType.NETWORK


class RateLimitError(DeliveryFailure):
    """Channel rate limit exceeded."""

    error_type = DeliveryErrorType.RATE_LIMITED

    def __init__(
        self,
        message: str,
        retry_after_ms: int | None = None,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, retry=True, details=details)
        self.retry_after_ms = retry_after_ms

    def to_delivery_error(self) -> DeliveryError:
        error = super().to_delivery_error()
        return error.model_copy(update={"retry_after_ms": self.retry_after_ms})


class PermissionDeniedError(DeliveryFailure):
    """Authentication or authorization failure."""

    error_type = DeliveryErrorType.PERMISSION_DENIED


class NotFoundError(DeliveryFailure):
    """Delivery target does not exist."""

    error_type = DeliveryErrorType.NOT_FOUND


class ContentRejectedError(DeliveryFailure):
    """Channel refused the message content."""

    error_type = DeliveryErrorType.CONTENT_REJECTED
