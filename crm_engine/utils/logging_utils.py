"""Structured logging utilities with context support.

Context lives in a ``contextvars.ContextVar`` so that concurrent intent
executions (separate asyncio tasks) never see each other's fields.
"""

import contextvars
import logging
import uuid
from typing import Any, Dict, Mapping, Optional

_log_context: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar(
    "crm_log_context", default={}
)

REDACTED = "***REDACTED***"

# Credentials plus the personal contact details carried by CRM entities
SENSITIVE_FIELDS = {
    "password",
    "token",
    "api_key",
    "apikey",
    "secret",
    "private_key",
    "credentials",
    "authorization",
    "email",
    "phone",
}


def generate_correlation_id() -> str:
    """
    Generate a unique correlation ID for tracking one intent execution.

    Returns:
        UUID string to use as correlation ID
    """
    return str(uuid.uuid4())


def get_correlation_id() -> Optional[str]:
    """
    Get the current correlation ID from the log context.

    Returns:
        Current correlation ID or None if not set
    """
    return _log_context.get().get("correlation_id")


def get_log_context() -> Dict[str, Any]:
    """Copy of the fields currently attached to log records."""
    return dict(_log_context.get())


class LogContext:
    """
    Context manager for adding structured fields to log records.

    Fields are added to every record logged inside the ``with`` block by
    the ``ContextFilter`` installed by ``configure_logging``.

    Example:
        with LogContext(correlation_id=generate_correlation_id(), action="create_deal"):
            logger.info("Executing intent")
    """

    def __init__(self, **kwargs):
        """
        Initialize log context with custom fields.

        Args:
            **kwargs: Key-value pairs to add to log records
        """
        self.fields = kwargs
        self._token: Optional[contextvars.Token] = None

    def __enter__(self):
        merged = {**_log_context.get(), **self.fields}
        self._token = _log_context.set(merged)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._token is not None:
            _log_context.reset(self._token)
            self._token = None


class ContextFilter(logging.Filter):
    """Logging filter that adds context fields to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _log_context.get().items():
            setattr(record, key, value)
        return True


def sanitize_sensitive_data(data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Redact sensitive fields in a mapping before it is logged.

    Keys are matched case-insensitively by substring, so ``contactEmail``
    and ``contact_phone`` are redacted as well. Nested mappings and lists
    of mappings are processed recursively.

    Args:
        data: Mapping to sanitize

    Returns:
        Sanitized copy with sensitive values redacted
    """
    if not isinstance(data, Mapping):
        return data

    sanitized: Dict[str, Any] = {}
    for key, value in data.items():
        if any(sensitive in str(key).lower() for sensitive in SENSITIVE_FIELDS):
            sanitized[key] = REDACTED if value is not None else None
        elif isinstance(value, Mapping):
            sanitized[key] = sanitize_sensitive_data(value)
        elif isinstance(value, list):
            sanitized[key] = [
                sanitize_sensitive_data(item) if isinstance(item, Mapping) else item
                for item in value
            ]
        else:
            sanitized[key] = value

    return sanitized
