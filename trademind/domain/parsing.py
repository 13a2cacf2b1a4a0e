"""Pure functions for turning the model's markdown answer into domain records."""

import re
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from ..diagnostics import DiagnosticLog, SECTION_MISSING, TRADE_LEVEL_ABSENT, emit
from .models import (
    AnalysisResult,
    DATA_UNAVAILABLE,
    NO_RECENT_NEWS,
    PRICE_UNAVAILABLE,
    Sections,
    Source,
    TradeKind,
    TradeLevel,
    UNKNOWN_STOCK,
)

logger = logging.getLogger(__name__)

# "## Title" but not "### Title"
_HEADING_RE = re.compile(r"^\s*##(?!#)\s*(?P<title>.*)$")
_SUBJECT_RE = re.compile(r"Stock Identified:\s*(?P<name>[^\n]*)", re.IGNORECASE)

# Title keyword -> Sections field, checked in this order
_SECTION_KEYWORDS: Tuple[Tuple[str, str], ...] = (
    ("fundamental", "fundamentals"),
    ("technical", "technicals"),
    ("news", "news"),
    ("price", "current_price"),
)

_SECTION_DEFAULTS = {
    "current_price": PRICE_UNAVAILABLE,
    "fundamentals": DATA_UNAVAILABLE,
    "technicals": DATA_UNAVAILABLE,
    "news": NO_RECENT_NEWS,
}

# Labels of a trade-level block, in the order they must appear
TRADE_LABELS: Tuple[str, ...] = (
    "Action",
    "Entry",
    "Target",
    "Stop Loss",
    "Win Probability",
    "Reasoning",
)


def _label_pattern(label: str) -> "re.Pattern[str]":
    # Leading bullets, list numbers and bold markers are tolerated:
    # "- **Stop Loss:** 95", "1. Action: BUY"
    words = r"\s+".join(re.escape(word) for word in label.split())
    return re.compile(
        rf"^[\s\-*•]*(?:\d+[.)]\s*)?[\s*]*{words}\s*:[\s*]*(?P<value>.*?)\s*$",
        re.IGNORECASE,
    )


def _kind_pattern(kind: TradeKind) -> "re.Pattern[str]":
    return re.compile(rf"\*\*\s*{kind.value}\s*:?\s*\*\*", re.IGNORECASE)


_LABEL_PATTERNS = {label: _label_pattern(label) for label in TRADE_LABELS}
_KIND_PATTERNS = {kind: _kind_pattern(kind) for kind in TradeKind}


# ============================================================================
# Section parser
# ============================================================================

def split_heading_blocks(raw_text: str) -> List[Tuple[str, str]]:
    """
    Split markdown into (title, body) blocks at level-2 headings.

    Text before the first heading is not a block.

    Args:
        raw_text: Model output

    Returns:
        List of (lower-cased title, trimmed body) in input order
    """
    blocks: List[Tuple[str, str]] = []
    title: Optional[str] = None
    body: List[str] = []

    for line in (raw_text or "").splitlines():
        match = _HEADING_RE.match(line)
        if match:
            if title is not None:
                blocks.append((title, "\n".join(body).strip()))
            title = match.group("title").strip().lower()
            body = []
        elif title is not None:
            body.append(line)

    if title is not None:
        blocks.append((title, "\n".join(body).strip()))
    return blocks


def section_field_for_title(title: str) -> Optional[str]:
    """Map a heading title to a Sections field by keyword, or None."""
    lowered = title.lower()
    for keyword, field_name in _SECTION_KEYWORDS:
        if keyword in lowered:
            return field_name
    return None


def parse_sections(
    raw_text: str,
    diagnostics: Optional[DiagnosticLog] = None,
) -> Sections:
    """
    Extract the price, fundamentals, technicals and news sections.

    Matching is by title keyword, so heading order does not matter. When
    several headings map to the same field the last non-empty one wins: an
    empty duplicate never overwrites an earlier non-empty body. Fields whose
    section is missing (or empty) keep their sentinel default.

    Args:
        raw_text: Model output
        diagnostics: Optional collector for fallback events

    Returns:
        Sections with every field populated
    """
    found: Dict[str, str] = {}

    for title, body in split_heading_blocks(raw_text):
        field_name = section_field_for_title(title)
        if field_name is None:
            logger.debug(f"Ignoring section: {title!r}")
            continue
        if field_name == "current_price":
            body = body.replace("**", "").strip()
        if not body:
            logger.debug(f"Empty body for section: {title!r}")
            continue
        found[field_name] = body

    for field_name, default in _SECTION_DEFAULTS.items():
        if field_name not in found:
            emit(
                diagnostics,
                SECTION_MISSING,
                f"No {field_name} section, using default",
                field=field_name,
                default=default,
            )

    return Sections(**found)


# ============================================================================
# Trade-level extractor
# ============================================================================

@dataclass(frozen=True)
class TradeLevelMatch:
    """
    Outcome of looking for one strategy block.

    Exactly one of level / missing is set: missing names the marker or
    the first label that could not be found in order.
    """
    kind: TradeKind
    level: Optional[TradeLevel] = None
    missing: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.level is not None


def _is_block_boundary(line: str) -> bool:
    if _HEADING_RE.match(line):
        return True
    return any(pattern.search(line) for pattern in _KIND_PATTERNS.values())


def find_trade_blocks(raw_text: str, kind: TradeKind) -> List[List[str]]:
    """
    Lines following each bold marker for kind, in input order.

    A block ends at the next strategy marker, the next level-2 heading or
    the end of the text. The model may bold a strategy name in passing
    (under Technicals, say), so every occurrence yields a candidate block.
    """
    lines = (raw_text or "").splitlines()
    pattern = _KIND_PATTERNS[kind]
    blocks: List[List[str]] = []

    for index, line in enumerate(lines):
        if not pattern.search(line):
            continue
        block: List[str] = []
        for following in lines[index + 1:]:
            if _is_block_boundary(following):
                break
            block.append(following)
        blocks.append(block)

    return blocks


def read_labeled_value(line: str, label: str) -> Optional[str]:
    """Value of a "Label: value" line, or None if the line has another label."""
    match = _LABEL_PATTERNS[label].match(line)
    if match is None:
        return None
    return match.group("value")


def _read_reasoning(first: str, rest: Sequence[str]) -> str:
    # Reasoning runs on until a blank line
    parts = [first]
    for line in rest:
        if not line.strip():
            break
        parts.append(line.strip())
    return " ".join(part for part in parts if part).strip()


def _match_block(block: Sequence[str], kind: TradeKind) -> TradeLevelMatch:
    values: Dict[str, str] = {}
    position = 0

    for label in TRADE_LABELS:
        value = None
        while position < len(block):
            line = block[position]
            position += 1
            value = read_labeled_value(line, label)
            if value is not None:
                break
        if value is None:
            return TradeLevelMatch(kind=kind, missing=label)
        if label == "Reasoning":
            value = _read_reasoning(value, block[position:])
        values[label] = value.strip()

    level = TradeLevel(
        kind=kind,
        action=values["Action"].upper(),
        entry=values["Entry"],
        target=values["Target"],
        stop_loss=values["Stop Loss"],
        win_probability=values["Win Probability"],
        reasoning=values["Reasoning"],
    )
    return TradeLevelMatch(kind=kind, level=level)


def match_trade_level(raw_text: str, kind: TradeKind) -> TradeLevelMatch:
    """
    Look for a trade-level block and read its six labels in order.

    Every bold marker for kind is tried in turn and the first block with
    all six labels wins. When none is complete, missing names the furthest
    label any candidate reached.

    Args:
        raw_text: Model output
        kind: Strategy to look for

    Returns:
        TradeLevelMatch with either the level or the name of what was missing
    """
    blocks = find_trade_blocks(raw_text, kind)
    if not blocks:
        return TradeLevelMatch(kind=kind, missing=f"**{kind.value}**")

    misses: List[TradeLevelMatch] = []
    for block in blocks:
        outcome = _match_block(block, kind)
        if outcome.found:
            return outcome
        misses.append(outcome)

    return max(misses, key=lambda miss: TRADE_LABELS.index(miss.missing))


def extract_trade_level(raw_text: str, kind: TradeKind) -> Optional[TradeLevel]:
    """Trade level for kind, or None when the block is absent or incomplete."""
    return match_trade_level(raw_text, kind).level


def extract_trade_levels(
    raw_text: str,
    diagnostics: Optional[DiagnosticLog] = None,
) -> Tuple[TradeLevel, ...]:
    """
    Extract Intraday, Swing and Delivery levels independently.

    Returns:
        Present levels in fixed order, at most one per kind
    """
    levels: List[TradeLevel] = []
    for kind in TradeKind:
        outcome = match_trade_level(raw_text, kind)
        if outcome.level is not None:
            levels.append(outcome.level)
        else:
            emit(
                diagnostics,
                TRADE_LEVEL_ABSENT,
                f"No {kind.value} trade level",
                kind=kind.value,
                missing=outcome.missing,
            )
    logger.debug(f"Extracted {len(levels)} trade levels")
    return tuple(levels)


# ============================================================================
# Full answer
# ============================================================================

def detect_subject_name(raw_text: str, requested: Optional[str]) -> str:
    """
    Subject name for the result.

    A "Stock Identified: <name>" line only replaces the requested name when
    the caller did not supply one (image-only analysis).
    """
    requested = (requested or "").strip()
    if requested and requested != UNKNOWN_STOCK:
        return requested

    match = _SUBJECT_RE.search(raw_text or "")
    if match:
        name = match.group("name").replace("**", "").strip()
        if name:
            return name
    return requested or UNKNOWN_STOCK


def parse_analysis(
    raw_text: str,
    subject_name: Optional[str],
    sources: Sequence[Source] = (),
    diagnostics: Optional[DiagnosticLog] = None,
) -> AnalysisResult:
    """
    Build the full analysis record from one model answer.

    Never raises on malformed text: unmatched parts fall back to defaults.

    Args:
        raw_text: Model output
        subject_name: Name the caller asked about (may be empty)
        sources: Already deduplicated citations
        diagnostics: Optional collector for fallback events

    Returns:
        AnalysisResult
    """
    sections = parse_sections(raw_text, diagnostics)
    return AnalysisResult(
        subject_name=detect_subject_name(raw_text, subject_name),
        current_price=sections.current_price,
        fundamentals=sections.fundamentals,
        technicals=sections.technicals,
        news=sections.news,
        trade_levels=extract_trade_levels(raw_text, diagnostics),
        sources=tuple(sources),
        raw_text=raw_text or "",
    )
