"""Prompt builders for the analysis, earnings and market requests."""

from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .diagnostics import DiagnosticLog, TIMEZONE_DEFAULTED, emit

HINGLISH_INSTRUCTION = (
    "IMPORTANT LANGUAGE INSTRUCTION:\n"
    "The content of the analysis (Reasoning, News descriptions, Fundamentals descriptions, "
    "Technicals descriptions) MUST be in **HINGLISH** (A mix of Hindi and English).\n"
    "Use language that Indian traders commonly use.\n"
)

_TRADE_BLOCK = (
    "Action: [BUY/SELL/WAIT]\n"
    "Entry: [Price]\n"
    "Target: [Price]\n"
    "Stop Loss: [Price]\n"
    "Win Probability: [Percentage, e.g. 75%]\n"
    "Reasoning: [Short explanation in HINGLISH]\n"
)

FORMAT_INSTRUCTION = (
    "Format your response EXACTLY with these Markdown headers "
    "(Keep the Headers and Keywords in ENGLISH for parsing):\n\n"
    "## Current Price\n"
    "[Just the price and currency, e.g., ₹2,450 INR]\n\n"
    "## Fundamentals\n"
    "[Bullet points in HINGLISH: Market Cap, PE Ratio, Sector, Revenue Growth, "
    "Key Strengths/Weaknesses]\n\n"
    "## Technicals\n"
    "[Bullet points in HINGLISH: RSI, MACD, Moving Averages (50/200 DMA), Chart Patterns, "
    "Volume analysis. Incorporate insights from the image if provided.]\n\n"
    "## News\n"
    "[Summary of top 3 recent news headlines affecting the stock in HINGLISH]\n\n"
    "## Trade Levels\n"
    "For each style, provide Action (BUY/SELL/WAIT), Entry, Target, Stop Loss, "
    "Win Probability, and brief Reasoning. Keep the labels in ENGLISH.\n\n"
    f"**Intraday**\n{_TRADE_BLOCK}\n"
    f"**Swing**\n{_TRADE_BLOCK}\n"
    f"**Delivery**\n{_TRADE_BLOCK}"
)


def build_analysis_prompt(subject: Optional[str], has_image: bool) -> str:
    """
    Prompt for a full stock analysis.

    With an image and no subject, the model is asked to name the stock on a
    leading "Stock Identified:" line.
    """
    subject = (subject or "").strip()

    if has_image:
        target = f'"{subject}"' if subject else "the stock identified in the image"
        intro = (
            "Analyze the provided image.\n"
            "If it is a stock chart, identify technical patterns "
            "(Support, Resistance, Trend, Candle patterns).\n"
            "If it is a financial statement, analyze the numbers.\n"
            "If it is a news clipping, analyze the sentiment.\n\n"
            f"Then, perform a comprehensive stock analysis for {target}.\n"
            "If the stock name was not explicitly provided by me, try to identify it from the "
            'image and start your response with "Stock Identified: [Name]".\n\n'
            "You MUST use Google Search to get the LATEST REAL-TIME data to supplement "
            "what is in the image.\n\n"
            f"{HINGLISH_INSTRUCTION}"
            'Example: "Market ka trend bullish lag raha hai kyunki RSI strong hai aur volume '
            'bhi increase ho raha hai."\n\n'
        )
    else:
        intro = (
            f'Analyze the stock "{subject}" for the Indian Market (NSE/BSE) or US Market '
            "depending on the name.\n"
            "You MUST use Google Search to get the LATEST REAL-TIME data.\n\n"
            f"{HINGLISH_INSTRUCTION}"
            'Example: "Stock fundamentals strong hai par technicals thoda weak lag raha hai '
            'short term ke liye."\n\n'
        )

    return intro + FORMAT_INSTRUCTION


def format_market_date(
    now: Optional[datetime] = None,
    timezone: str = "Asia/Kolkata",
    diagnostics: Optional[DiagnosticLog] = None,
) -> str:
    """
    Render a date like "Friday, 16 October 2026" in the market timezone.

    An unknown timezone name falls back to UTC.
    """
    try:
        zone = ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        emit(
            diagnostics,
            TIMEZONE_DEFAULTED,
            f"Unknown market timezone {timezone!r}, using UTC: {exc}",
            timezone=timezone,
        )
        zone = ZoneInfo("UTC")
    moment = now.astimezone(zone) if now is not None else datetime.now(zone)
    return f"{moment:%A}, {moment.day} {moment:%B %Y}"


def build_earnings_prompt(today: str) -> str:
    """Prompt asking for today's result announcements as a JSON array."""
    return (
        "Find the major companies listed on NSE/BSE (Indian Stock Market) that are scheduled "
        "to declare their quarterly results (Earnings) or board meeting outcomes "
        f"TODAY, {today}.\n\n"
        'Use Google Search to find the latest calendar or news for "India stock market '
        'results today".\n\n'
        "Return the output as a STRICT JSON array of objects.\n"
        "Each object must have:\n"
        '- "symbol": Stock symbol or short name.\n'
        '- "name": Full company name.\n'
        '- "expectation": A very short summary (e.g. "Q3 Earnings", "Dividend", "Stock Split").\n\n'
        "If no major companies are declaring today, find upcoming ones for tomorrow and note "
        'that in the "expectation".\n\n'
        "Return ONLY valid JSON. No markdown formatting.\n"
        "Example:\n"
        "[\n"
        '  {"symbol": "TCS", "name": "Tata Consultancy Services", "expectation": "Q3 Results"},\n'
        '  {"symbol": "INFY", "name": "Infosys", "expectation": "Dividend"}\n'
        "]"
    )


def build_market_prompt() -> str:
    """Prompt asking for gainers, losers and breakouts as a JSON object."""
    return (
        "Use Google Search to find the real-time LIVE market data for the Indian Stock Market "
        "(NSE) for TODAY.\n"
        "Identify:\n"
        "1. Top 5 Gainers (Nifty 50 or broad market)\n"
        "2. Top 5 Losers (Nifty 50 or broad market)\n"
        "3. 5 Stocks showing 52-Week High Breakout today.\n\n"
        'Return the output as a STRICT JSON object with these keys: "gainers", "losers", '
        '"breakouts".\n'
        'Each value should be an array of objects with: "symbol", "price", "change".\n\n'
        "Example:\n"
        "{\n"
        '  "gainers": [{"symbol": "RELIANCE", "price": "2450", "change": "+2.5%"}],\n'
        '  "losers": [{"symbol": "TCS", "price": "3200", "change": "-1.2%"}],\n'
        '  "breakouts": [{"symbol": "ZOMATO", "price": "140", "change": "+5%"}]\n'
        "}\n\n"
        "Ensure the data is for TODAY.\n"
        "Return ONLY valid JSON."
    )
