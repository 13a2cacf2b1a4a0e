"""Web API - FastAPI application exposing the analysis service."""

import logging
from dataclasses import asdict
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, status
from pydantic import BaseModel

from . import __version__
from .errors import AnalysisError
from .service import StockAnalysisService

logger = logging.getLogger(__name__)


# ============== PYDANTIC MODELS ==============

class AnalyzeRequest(BaseModel):
    subject: str = ""
    image_base64: Optional[str] = None  # Chart, statement or news clipping


# ============== FASTAPI APP ==============

def _service(request: Request) -> StockAnalysisService:
    return request.app.state.service


def create_app(service: StockAnalysisService, lifespan=None) -> FastAPI:
    """
    Build the API around an already configured service.

    lifespan is handed to FastAPI; the caller uses it to release whatever
    the service holds (the shared HTTP client) on shutdown.
    """
    app = FastAPI(title="TradeMind API", version=__version__, lifespan=lifespan)
    app.state.service = service

    @app.get("/healthz")
    async def healthz():
        """Unauthenticated health check endpoint."""
        return {"status": "ok", "version": __version__}

    @app.post("/api/analyze")
    async def api_analyze(body: AnalyzeRequest, request: Request):
        """Full analysis; 502 with a user-facing message when the model fails."""
        if not body.subject.strip() and not body.image_base64:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Please enter a stock name or upload an image.",
            )
        try:
            result = await _service(request).analyze(body.subject, body.image_base64)
        except AnalysisError as exc:
            logger.warning("Analysis failed for %r: %s", body.subject, exc)
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
        return asdict(result)

    @app.get("/api/earnings")
    async def api_earnings(request: Request):
        items = await _service(request).get_upcoming_earnings()
        return [asdict(item) for item in items]

    @app.get("/api/market")
    async def api_market(request: Request):
        return asdict(await _service(request).get_market_overview())

    @app.get("/api/dashboard")
    async def api_dashboard(request: Request):
        """Earnings and market overview, fetched concurrently."""
        return asdict(await _service(request).load_dashboard())

    return app
