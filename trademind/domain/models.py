"""Domain models for stock analysis results."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


# Sentinel defaults substituted when a field cannot be extracted
PRICE_UNAVAILABLE = "N/A"
DATA_UNAVAILABLE = "Data not available."
NO_RECENT_NEWS = "No recent news found."
UNKNOWN_STOCK = "Unknown Stock"
NO_ANALYSIS = "No analysis generated."


class TradeKind(str, Enum):
    """Fixed time-horizon trading strategies, in extraction order."""
    INTRADAY = "Intraday"
    SWING = "Swing"
    DELIVERY = "Delivery"


class TradeAction(str, Enum):
    """Known action values. Parsed actions are kept as free text."""
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"
    WAIT = "WAIT"


@dataclass(frozen=True)
class TradeLevel:
    """One trade recommendation for a strategy kind."""
    kind: TradeKind
    action: str  # Upper-cased, usually a TradeAction value
    entry: str
    target: str
    stop_loss: str
    win_probability: str  # e.g. "75%"
    reasoning: str

    @property
    def is_known_action(self) -> bool:
        return self.action in TradeAction.__members__


@dataclass(frozen=True)
class Source:
    """Grounding citation attached by the model."""
    title: str
    uri: str


@dataclass(frozen=True)
class Sections:
    """Titled markdown sections, with sentinels for the missing ones."""
    current_price: str = PRICE_UNAVAILABLE
    fundamentals: str = DATA_UNAVAILABLE
    technicals: str = DATA_UNAVAILABLE
    news: str = NO_RECENT_NEWS


@dataclass(frozen=True)
class AnalysisResult:
    """
    Typed record extracted from one model answer.

    Text fields always hold either extracted content or a sentinel, so
    renderers never deal with missing values. raw_text keeps the untouched
    model output as an audit trail.
    """
    subject_name: str
    current_price: str = PRICE_UNAVAILABLE
    fundamentals: str = DATA_UNAVAILABLE
    technicals: str = DATA_UNAVAILABLE
    news: str = NO_RECENT_NEWS
    trade_levels: Tuple[TradeLevel, ...] = ()
    sources: Tuple[Source, ...] = ()
    raw_text: str = ""

    def trade_level(self, kind: TradeKind) -> Optional[TradeLevel]:
        for level in self.trade_levels:
            if level.kind == kind:
                return level
        return None


@dataclass(frozen=True)
class MarketMover:
    """Stock in one of the market overview lists."""
    symbol: str
    price: str
    change: str  # e.g. "+5.4%"


@dataclass(frozen=True)
class MarketOverview:
    gainers: Tuple[MarketMover, ...] = ()
    losers: Tuple[MarketMover, ...] = ()
    breakouts: Tuple[MarketMover, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.gainers or self.losers or self.breakouts)


@dataclass(frozen=True)
class EarningsItem:
    """Company declaring results or a board meeting outcome."""
    symbol: str
    name: str
    expectation: str  # e.g. "Q3 Results", "Dividend"


@dataclass(frozen=True)
class DashboardSnapshot:
    """Earnings calendar and market overview loaded together."""
    earnings: Tuple[EarningsItem, ...] = ()
    market: MarketOverview = field(default_factory=MarketOverview)
