"""
Error message sanitization utility.

Keeps internals (paths, tracebacks, SQL, key-like tokens) out of HTTP error
bodies for unexpected failures. Analysis errors from the model are not routed
through here: those are shown to the user verbatim.
"""

from __future__ import annotations

import re

from companion.observability.logging import get_logger

logger = get_logger(__name__)

SENSITIVE_PATTERNS = [
    # File paths
    r"/[^\s]+\.py",
    r"[A-Za-z]:\\[^\s]+",
    # Stack trace indicators
    r"Traceback \(most recent call last\)",
    r"File \".*\"",
    # Database errors
    r"sqlite3?\.",
    r"no such table",
    # API keys / secrets
    r"AIza[0-9A-Za-z_-]{20,}",
    r"Bearer [A-Za-z0-9._-]+",
    # Internal module names
    r"companion\.[a-z_.]+",
]

GENERIC_MESSAGES = {
    400: "Invalid request. Please check your input and try again.",
    404: "Resource not found.",
    409: "Request conflicts with the current state.",
    415: "Unsupported input.",
    422: "Invalid data format.",
    500: "An internal error occurred. Please try again later.",
}


def sanitize_error_message(message: str, status_code: int = 500) -> str:
    """
    Return ``message`` if it is safe to show, else a generic message.

    Server errors (5xx) always get the generic message.
    """
    generic = GENERIC_MESSAGES.get(status_code, "An error occurred.")
    if not message or status_code >= 500:
        return generic

    for pattern in SENSITIVE_PATTERNS:
        if re.search(pattern, message, re.IGNORECASE):
            logger.warning("Sanitized sensitive error pattern: %s", pattern)
            return generic

    return message


def get_safe_error_detail(error: Exception, status_code: int = 500) -> str:
    """Log the full error and return a client-safe detail string."""
    logger.error("Error (status=%d): %s - %s", status_code, type(error).__name__, error)
    return sanitize_error_message(str(error), status_code)
