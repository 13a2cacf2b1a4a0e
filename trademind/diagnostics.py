"""Structured diagnostic events for fallback paths."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

# Event codes
SECTION_MISSING = "section_missing"
TRADE_LEVEL_ABSENT = "trade_level_absent"
SOURCE_DROPPED = "source_dropped"
JSON_DECODE_FAILED = "json_decode_failed"
JSON_SHAPE_INVALID = "json_shape_invalid"
MARKET_KEY_DEFAULTED = "market_key_defaulted"
EARNINGS_FETCH_FAILED = "earnings_fetch_failed"
MARKET_FETCH_FAILED = "market_fetch_failed"
TIMEZONE_DEFAULTED = "timezone_defaulted"

# Fallbacks that mean the upstream answer was unusable, not just sparse
_WARNING_CODES = {
    JSON_DECODE_FAILED,
    JSON_SHAPE_INVALID,
    EARNINGS_FETCH_FAILED,
    MARKET_FETCH_FAILED,
    TIMEZONE_DEFAULTED,
}


@dataclass(frozen=True)
class DiagnosticEvent:
    """One fallback taken while parsing or decoding a model answer."""
    code: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


class DiagnosticLog:
    """
    Collects diagnostic events for one service instance.

    Lets a test or an operator tell a legitimately empty result from one
    that silently fell back to defaults.
    """

    def __init__(self):
        self._events: List[DiagnosticEvent] = []

    @property
    def events(self) -> List[DiagnosticEvent]:
        return list(self._events)

    def record(self, code: str, message: str, **details: Any) -> DiagnosticEvent:
        event = DiagnosticEvent(code=code, message=message, details=details)
        self._events.append(event)
        return event

    def codes(self) -> List[str]:
        return [event.code for event in self._events]

    def count(self, code: str) -> int:
        return sum(1 for event in self._events if event.code == code)

    def clear(self) -> None:
        self._events.clear()


def emit(
    diagnostics: Optional[DiagnosticLog],
    code: str,
    message: str,
    **details: Any,
) -> None:
    """Log a fallback event and record it when a collector is given."""
    level = logging.WARNING if code in _WARNING_CODES else logging.DEBUG
    logger.log(level, "[%s] %s %s", code, message, details or "")
    if diagnostics is not None:
        diagnostics.record(code, message, **details)
