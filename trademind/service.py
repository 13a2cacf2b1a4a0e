"""Stock analysis service: the API the presentation layer calls."""

import asyncio
import logging
from typing import Optional, Tuple

from .config import Config
from .diagnostics import (
    DiagnosticLog,
    EARNINGS_FETCH_FAILED,
    MARKET_FETCH_FAILED,
    emit,
)
from .domain.models import (
    AnalysisResult,
    DashboardSnapshot,
    EarningsItem,
    MarketOverview,
    NO_ANALYSIS,
    UNKNOWN_STOCK,
)
from .domain.parsing import parse_analysis
from .domain.payloads import parse_earnings, parse_market_overview
from .domain.sources import dedupe_sources
from .errors import AnalysisError, describe_failure
from .prompts import (
    build_analysis_prompt,
    build_earnings_prompt,
    build_market_prompt,
    format_market_date,
)
from .providers.gemini import InlineImage, ModelRequest, ModelResponse
from .retry import with_retry

logger = logging.getLogger(__name__)


class StockAnalysisService:
    """
    Analysis, earnings calendar and market overview over one model client.

    The model client is injected: any object with an async
    generate(ModelRequest) -> ModelResponse method.

    Only analyze() can fail outward, with an AnalysisError carrying a
    user-facing message. The two dashboard reads resolve to empty defaults.
    """

    def __init__(self, config: Config, model_client, diagnostics: Optional[DiagnosticLog] = None):
        self.config = config
        self.model_client = model_client
        self.diagnostics = diagnostics

    async def _generate(self, request: ModelRequest, label: str) -> ModelResponse:
        return await with_retry(
            lambda: self.model_client.generate(request),
            max_attempts=self.config.max_retries,
            initial_delay_ms=self.config.retry_initial_delay_ms,
            label=label,
        )

    async def analyze(self, subject_name: str = "", image_base64: Optional[str] = None) -> AnalysisResult:
        """
        Analyze a stock by name, by image, or both.

        Args:
            subject_name: Stock name or symbol (may be empty with an image)
            image_base64: Optional base64 image (chart, statement, clipping)

        Returns:
            AnalysisResult

        Raises:
            AnalysisError with a user-facing message
        """
        subject_name = (subject_name or "").strip()
        if not subject_name and not image_base64:
            raise AnalysisError("Please enter a stock name or upload an image.")

        image = InlineImage(data_base64=image_base64) if image_base64 else None
        request = ModelRequest(
            prompt=build_analysis_prompt(subject_name, has_image=image is not None),
            image=image,
            use_search=self.config.use_search_grounding,
        )

        logger.info("Analyzing %s (image=%s)", subject_name or "<from image>", image is not None)
        try:
            response = await self._generate(request, label="Gemini analysis")
        except Exception as exc:
            logger.error("Gemini API error for %s: %s", subject_name or "<image>", exc)
            raise AnalysisError(describe_failure(exc)) from exc

        text = response.text or NO_ANALYSIS
        sources = dedupe_sources(response.sources, self.diagnostics)
        result = parse_analysis(
            text,
            subject_name or UNKNOWN_STOCK,
            sources=sources,
            diagnostics=self.diagnostics,
        )
        logger.info(
            "Analysis for %s: %d trade levels, %d sources",
            result.subject_name,
            len(result.trade_levels),
            len(result.sources),
        )
        return result

    async def get_upcoming_earnings(self) -> Tuple[EarningsItem, ...]:
        """Companies declaring results today; empty on any failure."""
        try:
            today = format_market_date(
                timezone=self.config.market_timezone,
                diagnostics=self.diagnostics,
            )
            request = ModelRequest(
                prompt=build_earnings_prompt(today),
                use_search=self.config.use_search_grounding,
            )
            response = await self._generate(request, label="Gemini earnings")
            return parse_earnings(response.text or "[]", self.diagnostics)
        except Exception as exc:
            emit(self.diagnostics, EARNINGS_FETCH_FAILED, f"Failed to fetch earnings: {exc}")
            return ()

    async def get_market_overview(self) -> MarketOverview:
        """Top gainers, losers and breakouts; empty lists on any failure."""
        try:
            request = ModelRequest(
                prompt=build_market_prompt(),
                use_search=self.config.use_search_grounding,
            )
            response = await self._generate(request, label="Gemini market overview")
            return parse_market_overview(response.text or "{}", self.diagnostics)
        except Exception as exc:
            emit(self.diagnostics, MARKET_FETCH_FAILED, f"Failed to fetch market data: {exc}")
            return MarketOverview()

    async def load_dashboard(self) -> DashboardSnapshot:
        """Run both dashboard reads concurrently; ready when both have resolved."""
        earnings, market = await asyncio.gather(
            self.get_upcoming_earnings(),
            self.get_market_overview(),
        )
        return DashboardSnapshot(earnings=earnings, market=market)
