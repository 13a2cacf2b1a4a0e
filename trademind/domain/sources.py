"""Grounding citation cleanup."""

import logging
from typing import Any, Dict, Iterable, List, Optional

from ..diagnostics import DiagnosticLog, SOURCE_DROPPED, emit
from .models import Source

logger = logging.getLogger(__name__)


def sources_from_grounding_chunks(chunks: Optional[Iterable[Any]]) -> List[Source]:
    """
    Read (title, uri) pairs from groundingMetadata.groundingChunks.

    Chunks without a "web" object are skipped; the rest are passed through
    as-is so dedupe_sources can decide what to keep.
    """
    sources: List[Source] = []
    for chunk in chunks or []:
        web = chunk.get("web") if isinstance(chunk, dict) else None
        if not isinstance(web, dict):
            continue
        sources.append(Source(
            title=str(web.get("title") or ""),
            uri=str(web.get("uri") or ""),
        ))
    return sources


def dedupe_sources(
    sources: Iterable[Source],
    diagnostics: Optional[DiagnosticLog] = None,
) -> List[Source]:
    """
    Collapse citations to one per uri.

    The first title seen for a uri wins and first-occurrence order is kept.
    Entries missing a title or a uri are dropped.

    Args:
        sources: Raw citations in model order
        diagnostics: Optional collector for fallback events

    Returns:
        Unique sources
    """
    unique: Dict[str, Source] = {}

    for source in sources:
        title = (source.title or "").strip()
        uri = (source.uri or "").strip()
        if not title or not uri:
            emit(
                diagnostics,
                SOURCE_DROPPED,
                "Citation without title or uri",
                title=title,
                uri=uri,
            )
            continue
        if uri in unique:
            logger.debug(f"Duplicate citation skipped: {uri}")
            continue
        unique[uri] = Source(title=title, uri=uri)

    return list(unique.values())
