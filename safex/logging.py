"""
Safex SDK logging utilities.

Provides configurable logging for HTTP requests/responses and session state
transitions. Bulky payloads (report bodies, generated test files, file
contents) are truncated and secrets are redacted before anything is logged.
"""

import logging
import re
from typing import Any

# Create SDK-specific loggers
_sdk_logger = logging.getLogger("safex")
_http_logger = logging.getLogger("safex.http")
_session_logger = logging.getLogger("safex.session")

# Patterns for sensitive data that should be masked
_SENSITIVE_PATTERNS = [
    # GitHub tokens (classic and fine-grained)
    (re.compile(r"\bgh[pousr]_[A-Za-z0-9]{20,}\b"), "[TOKEN_REDACTED]"),
    (re.compile(r"\bgithub_pat_[A-Za-z0-9_]{20,}\b"), "[TOKEN_REDACTED]"),
    # Credentials embedded in a URL
    (re.compile(r"(https?://)[^/\s:@]+:[^/\s@]+@"), r"\1[REDACTED]@"),
    # Secret/token patterns
    (re.compile(r"(secret|token|password|api_key)['\"]?\s*[:=]\s*['\"][^'\"]+['\"]", re.IGNORECASE), r"\1: [REDACTED]"),
]

# Keys whose values are large free text and only get a preview
_BULKY_KEYS = {"report_content", "test_file", "content", "file_content"}

_DEFAULT_SENSITIVE_KEYS = {"secret", "token", "password", "api_key", "authorization"}

# Characters kept from a bulky value
_PREVIEW_LENGTH = 32


def configure_logging(
    level: int = logging.INFO,
    http_level: int | None = None,
    session_level: int | None = None,
    handler: logging.Handler | None = None,
    format_string: str | None = None,
) -> None:
    """
    Configure Safex SDK logging.

    Args:
        level: Default log level for all SDK loggers (default: INFO)
        http_level: Log level for HTTP request/response logging (default: same as level)
        session_level: Log level for session transitions (default: same as level)
        handler: Custom handler to use (default: StreamHandler to stderr)
        format_string: Custom format string (default: includes timestamp, level, logger name)

    Example:
        ```python
        import logging
        from safex.logging import configure_logging

        # Trace every request and state change
        configure_logging(level=logging.INFO, http_level=logging.DEBUG)
        ```
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    formatter = logging.Formatter(format_string)

    if handler is None:
        handler = logging.StreamHandler()

    handler.setFormatter(formatter)

    _sdk_logger.setLevel(level)
    _sdk_logger.addHandler(handler)

    _http_logger.setLevel(http_level if http_level is not None else level)
    _session_logger.setLevel(session_level if session_level is not None else level)


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a Safex SDK logger.

    Args:
        name: Logger name suffix (e.g., "http", "session"). If None, returns main SDK logger.

    Returns:
        Logger instance
    """
    if name is None:
        return _sdk_logger
    return logging.getLogger(f"safex.{name}")


def mask_sensitive_data(text: str) -> str:
    """
    Mask tokens and credentials in a string.

    Args:
        text: Text that may contain sensitive data

    Returns:
        Text with sensitive data masked
    """
    result = text
    for pattern, replacement in _SENSITIVE_PATTERNS:
        result = pattern.sub(replacement, result)
    return result


def truncate_text(value: str, length: int = _PREVIEW_LENGTH) -> str:
    """
    Shorten a long text value for logging.

    Returns the value unchanged when it is short enough, otherwise a prefix
    plus the number of characters dropped.
    """
    if len(value) <= length:
        return value
    return f"{value[:length]}...({len(value) - length} more chars)"


def safe_log_dict(
    data: dict[str, Any], sensitive_keys: set[str] | None = None
) -> dict[str, Any]:
    """
    Create a copy of a dictionary that is safe to log.

    Sensitive values are replaced with "[REDACTED]", bulky text values are
    truncated, nested dicts and lists are handled recursively.

    Args:
        data: Dictionary that may contain sensitive or bulky values
        sensitive_keys: Set of keys to mask (default: secret, token, password, api_key, authorization)

    Returns:
        Dictionary safe to pass to a logger
    """
    if sensitive_keys is None:
        sensitive_keys = _DEFAULT_SENSITIVE_KEYS

    result: dict[str, Any] = {}
    for key, value in data.items():
        key_lower = key.lower()
        if any(sk in key_lower for sk in sensitive_keys):
            result[key] = "[REDACTED]"
        elif key_lower in _BULKY_KEYS and isinstance(value, str):
            result[key] = truncate_text(value)
        elif isinstance(value, dict):
            result[key] = safe_log_dict(value, sensitive_keys)
        elif isinstance(value, list):
            result[key] = [
                safe_log_dict(item, sensitive_keys) if isinstance(item, dict) else item
                for item in value
            ]
        elif isinstance(value, str):
            result[key] = mask_sensitive_data(value)
        else:
            result[key] = value

    return result


def log_http_request(
    method: str,
    url: str,
    body: dict[str, Any] | None = None,
) -> None:
    """Log an HTTP request at DEBUG level with sensitive data masked."""
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"{method} {mask_sensitive_data(url)}"]

    if body:
        log_parts.append(f"body={safe_log_dict(body)}")

    _http_logger.debug(" | ".join(log_parts))


def log_http_response(
    status_code: int,
    url: str,
    body: dict[str, Any] | None = None,
    elapsed_ms: float | None = None,
) -> None:
    """Log an HTTP response at DEBUG level with sensitive data masked."""
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"Response {status_code} from {mask_sensitive_data(url)}"]

    if elapsed_ms is not None:
        log_parts.append(f"elapsed={elapsed_ms:.2f}ms")

    if body:
        log_parts.append(f"body={safe_log_dict(body)}")

    _http_logger.debug(" | ".join(log_parts))


def log_transition(
    operation: str,
    phase: str,
    sequence: int | None = None,
    detail: str | None = None,
) -> None:
    """
    Log a session sub-state transition at DEBUG level.

    Args:
        operation: Operation kind (e.g., "browse", "fuzz")
        phase: New phase name (e.g., "running", "failed")
        sequence: Request sequence number, when there is one
        detail: Optional short description (path, error code, ...)
    """
    if not _session_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"{operation} -> {phase}"]

    if sequence is not None:
        log_parts.append(f"seq={sequence}")

    if detail:
        log_parts.append(mask_sensitive_data(detail))

    _session_logger.debug(" | ".join(log_parts))


# Export public API
__all__ = [
    "configure_logging",
    "get_logger",
    "mask_sensitive_data",
    "truncate_text",
    "safe_log_dict",
    "log_http_request",
    "log_http_response",
    "log_transition",
]
