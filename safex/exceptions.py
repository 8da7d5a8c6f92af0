"""Safex SDK exception classes."""

from typing import Any


class SafexError(Exception):
    """Base exception for all Safex SDK errors."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")


class ConfigurationError(SafexError):
    """Raised when SDK configuration is invalid or missing."""

    def __init__(self, message: str) -> None:
        super().__init__("CONFIGURATION_ERROR", message)


class ValidationError(SafexError):
    """Raised when input is rejected before any request is sent."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__("VALIDATION_ERROR", message)
        self.field = field


class GatingError(SafexError):
    """Raised when a gated operation is invoked on an ineligible session."""

    def __init__(self, message: str) -> None:
        super().__init__("NOT_ELIGIBLE", message)


class TransportError(SafexError):
    """Raised on non-2xx responses and network failures."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int | None = None,
        payload: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(code, message)
        self.status_code = status_code
        self.payload = payload


class NetworkError(TransportError):
    """Raised when no response was received."""

    def __init__(self, message: str) -> None:
        super().__init__("CONNECTION_ERROR", message)


class NotFoundError(TransportError):
    """Raised when the service answers 404."""

    pass


class RateLimitedError(TransportError):
    """Raised when rate limited."""

    def __init__(
        self,
        code: str,
        message: str,
        retry_after: int,
        status_code: int | None = 429,
        payload: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(code, message, status_code, payload)
        self.retry_after = retry_after


class RequestRejectedError(TransportError):
    """Raised on any other non-2xx status below 500."""

    pass


class ServerError(TransportError):
    """Raised on server errors (5xx)."""

    pass


class ProtocolError(SafexError):
    """Raised when a 2xx response body is empty, unparsable or ill-shaped."""

    pass


class IntegrityError(ProtocolError):
    """Raised when a returned content hash does not match the local digest."""

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(
            "HASH_MISMATCH",
            f"Service returned hash {actual}, local digest is {expected}",
        )
        self.expected = expected
        self.actual = actual
