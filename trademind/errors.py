"""Error types and user-facing failure messages."""

import json
from typing import Any, Optional


class ModelAPIError(Exception):
    """Non-success answer from the model API."""

    def __init__(self, status: Optional[int], reason: str, detail: str = ""):
        self.status = status
        self.reason = reason
        self.detail = detail
        prefix = f"{status} {reason}" if status is not None else reason
        super().__init__(f"{prefix}: {detail}" if detail else prefix)


class AnalysisError(Exception):
    """Analysis failed; the message is safe to show to the user."""


# Ordered: first matching marker decides the message
_FAILURE_MESSAGES = (
    (("400",), "Invalid request. Please check your inputs."),
    (("403", "API key"), "Access denied. Please check your API key configuration."),
    (("429",), "Too many requests. Please wait a moment before trying again."),
    (("500", "503"), "AI Service is temporarily unavailable. Please try again."),
    (("SAFETY", "blocked"), "Analysis was blocked by safety filters. Please try a different image or stock."),
)
DEFAULT_FAILURE_MESSAGE = "Failed to analyze stock. Please try again."


def error_message(error: Any) -> str:
    """
    Message-like text of an error.

    Uses a "message" attribute when present (SDK-style errors), else str().
    """
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    if isinstance(error, BaseException):
        return str(error)
    if isinstance(error, dict):
        return str(error.get("message") or "")
    return ""


def error_status(error: Any) -> Optional[int]:
    """HTTP status carried by an error, if any."""
    for attr in ("status", "status_code", "code"):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return value
    response = getattr(error, "response", None)
    value = getattr(response, "status_code", None)
    return value if isinstance(value, int) else None


def describe_failure(error: Any) -> str:
    """Pick the user-facing message for a failed analysis."""
    text = error_message(error)
    if not text:
        try:
            text = json.dumps(error, default=str)
        except (TypeError, ValueError):
            text = repr(error)
    status = error_status(error)
    if status is not None and str(status) not in text:
        text = f"{status} {text}"

    for markers, message in _FAILURE_MESSAGES:
        if any(marker in text for marker in markers):
            return message
    return DEFAULT_FAILURE_MESSAGE
