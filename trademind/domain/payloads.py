"""Best-effort decoding of the JSON answers for the dashboard reads."""

import json
import logging
import re
from typing import Any, List, Optional, Tuple, TypeVar

from ..diagnostics import (
    DiagnosticLog,
    JSON_DECODE_FAILED,
    JSON_SHAPE_INVALID,
    MARKET_KEY_DEFAULTED,
    emit,
)
from .models import EarningsItem, MarketMover, MarketOverview

logger = logging.getLogger(__name__)

T = TypeVar("T")

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)

MARKET_KEYS = ("gainers", "losers", "breakouts")


def strip_code_fences(raw_text: str) -> str:
    """Remove ``` / ```json markers and surrounding whitespace."""
    return _FENCE_RE.sub("", raw_text or "").strip()


def decode_json_payload(
    raw_text: str,
    default: T,
    diagnostics: Optional[DiagnosticLog] = None,
) -> T:
    """
    Parse a JSON answer that may be wrapped in a markdown code fence.

    Never raises: any parse failure is logged and default is returned.

    Args:
        raw_text: Model output
        default: Value returned when the text is not valid JSON
        diagnostics: Optional collector for fallback events

    Returns:
        Decoded JSON value or default
    """
    cleaned = strip_code_fences(raw_text)
    try:
        return json.loads(cleaned)
    except (ValueError, TypeError, RecursionError) as exc:
        emit(
            diagnostics,
            JSON_DECODE_FAILED,
            f"Failed to parse JSON payload: {exc}",
            preview=cleaned[:120],
        )
        return default


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _movers(items: List[Any]) -> Tuple[MarketMover, ...]:
    movers = []
    for item in items:
        if not isinstance(item, dict):
            logger.debug(f"Skipping non-object market entry: {item!r}")
            continue
        movers.append(MarketMover(
            symbol=_text(item.get("symbol")),
            price=_text(item.get("price")),
            change=_text(item.get("change")),
        ))
    return tuple(movers)


def parse_market_overview(
    raw_text: str,
    diagnostics: Optional[DiagnosticLog] = None,
) -> MarketOverview:
    """
    Decode the market overview answer.

    Each of gainers / losers / breakouts is normalised on its own: a missing,
    null or non-list key becomes an empty list while the others are kept.
    """
    data = decode_json_payload(raw_text, None, diagnostics)
    if data is None:
        return MarketOverview()
    if not isinstance(data, dict):
        emit(
            diagnostics,
            JSON_SHAPE_INVALID,
            "Market overview is not a JSON object",
            type=type(data).__name__,
        )
        return MarketOverview()

    lists = {}
    for key in MARKET_KEYS:
        value = data.get(key)
        if isinstance(value, list):
            lists[key] = _movers(value)
        else:
            emit(
                diagnostics,
                MARKET_KEY_DEFAULTED,
                f"Market overview key {key!r} missing or invalid",
                key=key,
            )
            lists[key] = ()

    return MarketOverview(**lists)


def parse_earnings(
    raw_text: str,
    diagnostics: Optional[DiagnosticLog] = None,
) -> Tuple[EarningsItem, ...]:
    """
    Decode the earnings calendar answer.

    An empty list is a normal answer (nobody reporting). Non-object entries
    are dropped and missing fields become empty strings.
    """
    data = decode_json_payload(raw_text, [], diagnostics)
    if not isinstance(data, list):
        emit(
            diagnostics,
            JSON_SHAPE_INVALID,
            "Earnings calendar is not a JSON array",
            type=type(data).__name__,
        )
        return ()

    items = []
    for entry in data:
        if not isinstance(entry, dict):
            logger.debug(f"Skipping non-object earnings entry: {entry!r}")
            continue
        items.append(EarningsItem(
            symbol=_text(entry.get("symbol")),
            name=_text(entry.get("name")),
            expectation=_text(entry.get("expectation")),
        ))
    return tuple(items)
