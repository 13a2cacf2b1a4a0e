"""Main entry point for TradeMind."""

import argparse
import asyncio
import base64
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import httpx
import uvicorn
from dotenv import load_dotenv

from .config import Config
from .diagnostics import DiagnosticLog
from .errors import AnalysisError
from .formatters import format_analysis, format_dashboard
from .providers.gemini import GeminiClient
from .service import StockAnalysisService
from .web_api import create_app

# Configure logging
logging.basicConfig(
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    level=logging.INFO,
    handlers=[logging.StreamHandler(sys.stderr)],
)
logger = logging.getLogger(__name__)

# Quiet some noisy third-party loggers
for _name in ("httpx", "httpcore"):
    logging.getLogger(_name).setLevel(logging.WARNING)


def build_http_client(config: Config) -> httpx.AsyncClient:
    """Shared HTTP client with connection pooling."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(config.http_timeout),
        limits=httpx.Limits(max_keepalive_connections=10, max_connections=20),
    )


def build_service(config: Config, http_client: httpx.AsyncClient) -> StockAnalysisService:
    semaphore = asyncio.Semaphore(config.max_concurrent_requests)
    client = GeminiClient(config=config, http_client=http_client, semaphore=semaphore)
    return StockAnalysisService(config=config, model_client=client, diagnostics=DiagnosticLog())


def read_image(path: Optional[str]) -> Optional[str]:
    if not path:
        return None
    return base64.b64encode(Path(path).read_bytes()).decode("ascii")


async def run_analyze(config: Config, subject: str, image_path: Optional[str]) -> int:
    http_client = build_http_client(config)
    try:
        service = build_service(config, http_client)
        result = await service.analyze(subject, read_image(image_path))
        print(format_analysis(result))
        return 0
    except AnalysisError as exc:
        print(f"❌ {exc}", file=sys.stderr)
        return 1
    finally:
        await http_client.aclose()


async def run_dashboard(config: Config) -> int:
    http_client = build_http_client(config)
    try:
        service = build_service(config, http_client)
        snapshot = await service.load_dashboard()
        print(format_dashboard(snapshot))
        return 0
    finally:
        await http_client.aclose()


def http_client_lifespan(http_client: httpx.AsyncClient):
    """FastAPI lifespan that closes the shared HTTP client on shutdown."""

    @asynccontextmanager
    async def lifespan(app):
        yield
        await http_client.aclose()

    return lifespan


def serve(config: Config) -> None:
    """Run the web API; the HTTP client lives as long as the server."""
    http_client = build_http_client(config)
    app = create_app(
        build_service(config, http_client),
        lifespan=http_client_lifespan(http_client),
    )

    logger.info("Starting web API on %s:%d (model=%s)", config.web_host, config.web_port, config.gemini_model)
    uvicorn.run(app, host=config.web_host, port=config.web_port, log_level="info")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="trademind", description="AI stock analysis")
    commands = parser.add_subparsers(dest="command", required=True)

    analyze = commands.add_parser("analyze", help="Analyze a stock by name and/or image")
    analyze.add_argument("subject", nargs="?", default="", help="Stock name or symbol")
    analyze.add_argument("--image", help="Chart, statement or news clipping image")

    commands.add_parser("dashboard", help="Show today's results calendar and market movers")
    commands.add_parser("serve", help="Run the web API")
    return parser.parse_args(argv)


def run(argv=None) -> None:
    """Synchronous entry point."""
    load_dotenv()
    args = parse_args(argv)
    config = Config.from_env()

    try:
        if args.command == "analyze":
            sys.exit(asyncio.run(run_analyze(config, args.subject, args.image)))
        elif args.command == "dashboard":
            sys.exit(asyncio.run(run_dashboard(config)))
        else:
            serve(config)
    except KeyboardInterrupt:
        logger.info("Stopped by user")


if __name__ == "__main__":
    run()
