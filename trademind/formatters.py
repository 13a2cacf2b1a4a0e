"""Plain-text output formatters for the command line (pure functions)."""

from typing import Sequence

from .domain.models import AnalysisResult, DashboardSnapshot, MarketMover

_ACTION_EMOJI = {"BUY": "🟢", "SELL": "🔴", "HOLD": "🟡", "WAIT": "⚪"}


def format_analysis(result: AnalysisResult) -> str:
    """
    Format an AnalysisResult into displayable text.

    Args:
        result: Parsed analysis

    Returns:
        Formatted text string
    """
    lines = [
        f"📈 {result.subject_name}",
        f"Price: {result.current_price}",
        "",
        "Fundamentals:",
        result.fundamentals,
        "",
        "Technicals:",
        result.technicals,
        "",
        "News:",
        result.news,
    ]

    if result.trade_levels:
        lines.append("")
        lines.append("Trade Levels:")
        for level in result.trade_levels:
            emoji = _ACTION_EMOJI.get(level.action, "❔")
            lines.append(
                f"{emoji} {level.kind.value}: {level.action} | Entry {level.entry} | "
                f"Target {level.target} | SL {level.stop_loss} | Win {level.win_probability}"
            )
            lines.append(f"   {level.reasoning}")
    else:
        lines.append("")
        lines.append("No trade levels could be read from the answer.")

    if result.sources:
        lines.append("")
        lines.append("Sources:")
        for source in result.sources:
            lines.append(f"- {source.title}: {source.uri}")

    return "\n".join(lines)


def _format_movers(title: str, movers: Sequence[MarketMover]) -> list:
    lines = [title]
    if not movers:
        lines.append("  n/a")
    for mover in movers:
        lines.append(f"  {mover.symbol}: {mover.price} ({mover.change})")
    return lines


def format_dashboard(snapshot: DashboardSnapshot) -> str:
    """Format the earnings calendar and market overview."""
    lines = ["📅 Results Today"]
    if not snapshot.earnings:
        lines.append("  No major companies reporting.")
    for item in snapshot.earnings:
        lines.append(f"  {item.symbol} ({item.name}): {item.expectation}")

    lines.append("")
    lines.extend(_format_movers("🚀 Top Gainers", snapshot.market.gainers))
    lines.extend(_format_movers("📉 Top Losers", snapshot.market.losers))
    lines.extend(_format_movers("⚡ 52W Breakouts", snapshot.market.breakouts))
    return "\n".join(lines)
