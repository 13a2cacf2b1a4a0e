"""Configuration management for TradeMind."""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not an integer, using {default}")
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


@dataclass
class Config:
    """Application configuration loaded from environment variables."""

    # Gemini
    gemini_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_MODEL
    gemini_base_url: str = DEFAULT_BASE_URL
    use_search_grounding: bool = True

    # Network settings
    http_timeout: int = 60
    max_concurrent_requests: int = 5
    max_retries: int = 3  # Total attempts per model call
    retry_initial_delay_ms: int = 1000

    # Earnings calendar date is rendered in the market's timezone
    market_timezone: str = "Asia/Kolkata"

    # Web API
    web_host: str = "0.0.0.0"
    web_port: int = 8000

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from environment variables."""
        api_key = (
            os.getenv("GEMINI_API_KEY", "").strip()
            or os.getenv("API_KEY", "").strip()
            or None
        )
        if not api_key:
            logger.warning("GEMINI_API_KEY not set; model calls will be rejected")

        return cls(
            gemini_api_key=api_key,
            gemini_model=os.getenv("GEMINI_MODEL", "").strip() or DEFAULT_MODEL,
            gemini_base_url=os.getenv("GEMINI_BASE_URL", "").strip().rstrip("/") or DEFAULT_BASE_URL,
            use_search_grounding=_env_bool("USE_SEARCH_GROUNDING", True),
            http_timeout=_env_int("HTTP_TIMEOUT", 60),
            max_concurrent_requests=_env_int("MAX_CONCURRENT_REQUESTS", 5),
            max_retries=_env_int("MAX_RETRIES", 3),
            retry_initial_delay_ms=_env_int("RETRY_INITIAL_DELAY_MS", 1000),
            market_timezone=os.getenv("MARKET_TIMEZONE", "").strip() or "Asia/Kolkata",
            web_host=os.getenv("WEB_HOST", "").strip() or "0.0.0.0",
            web_port=_env_int("PORT", 8000),
        )
