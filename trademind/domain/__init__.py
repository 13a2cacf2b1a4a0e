"""Domain layer - models and parsing of model answers."""

from .models import (
    AnalysisResult,
    DashboardSnapshot,
    EarningsItem,
    MarketMover,
    MarketOverview,
    Sections,
    Source,
    TradeAction,
    TradeKind,
    TradeLevel,
)
from .parsing import parse_analysis, parse_sections, extract_trade_level, extract_trade_levels
from .payloads import decode_json_payload, parse_earnings, parse_market_overview
from .sources import dedupe_sources

__all__ = [
    "AnalysisResult",
    "DashboardSnapshot",
    "EarningsItem",
    "MarketMover",
    "MarketOverview",
    "Sections",
    "Source",
    "TradeAction",
    "TradeKind",
    "TradeLevel",
    "parse_analysis",
    "parse_sections",
    "extract_trade_level",
    "extract_trade_levels",
    "decode_json_payload",
    "parse_earnings",
    "parse_market_overview",
    "dedupe_sources",
]
