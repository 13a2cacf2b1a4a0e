"""Gemini generateContent client with search grounding."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from ..config import Config
from ..domain.models import Source
from ..domain.sources import sources_from_grounding_chunks
from ..errors import ModelAPIError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InlineImage:
    """Image sent alongside the prompt."""
    data_base64: str
    mime_type: str = "image/jpeg"


@dataclass(frozen=True)
class ModelRequest:
    prompt: str
    image: Optional[InlineImage] = None
    use_search: bool = True


@dataclass(frozen=True)
class ModelResponse:
    """Generated text plus raw (not deduplicated) grounding citations."""
    text: str
    sources: List[Source] = field(default_factory=list)


class GeminiClient:
    """
    Thin async client for the Generative Language REST API.

    Raises ModelAPIError for error answers and safety blocks; transport
    errors from httpx propagate unchanged so the retry layer can classify
    them.
    """

    def __init__(
        self,
        config: Config,
        http_client: httpx.AsyncClient,
        semaphore: asyncio.Semaphore,
    ):
        self.config = config
        self.http_client = http_client
        self.semaphore = semaphore

    @property
    def endpoint(self) -> str:
        return f"{self.config.gemini_base_url}/models/{self.config.gemini_model}:generateContent"

    @staticmethod
    def build_payload(request: ModelRequest) -> Dict[str, Any]:
        """Request body: optional inline image first, then the prompt text."""
        parts: List[Dict[str, Any]] = []
        if request.image is not None:
            parts.append({
                "inline_data": {
                    "mime_type": request.image.mime_type,
                    "data": request.image.data_base64,
                }
            })
        parts.append({"text": request.prompt})

        payload: Dict[str, Any] = {"contents": [{"role": "user", "parts": parts}]}
        if request.use_search:
            payload["tools"] = [{"google_search": {}}]
        return payload

    async def generate(self, request: ModelRequest) -> ModelResponse:
        """
        Run one generateContent call.

        Args:
            request: Prompt, optional image and search flag

        Returns:
            ModelResponse with the joined candidate text ("" when empty)
        """
        if not self.config.gemini_api_key:
            raise ModelAPIError(403, "PERMISSION_DENIED", "API key not configured")

        async with self.semaphore:
            response = await self.http_client.post(
                self.endpoint,
                json=self.build_payload(request),
                headers={
                    "x-goog-api-key": self.config.gemini_api_key,
                    "Content-Type": "application/json",
                },
                timeout=self.config.http_timeout,
            )

        if response.status_code >= 400:
            raise self._error_from_response(response)

        try:
            body = response.json()
        except ValueError as exc:
            raise ModelAPIError(response.status_code, "INVALID_RESPONSE", f"Non-JSON body: {exc}") from exc

        return self.parse_response(body)

    @staticmethod
    def _error_from_response(response: httpx.Response) -> ModelAPIError:
        reason = response.reason_phrase or "ERROR"
        detail = response.text[:300]
        try:
            error = response.json().get("error") or {}
            reason = error.get("status") or reason
            detail = error.get("message") or detail
        except (ValueError, AttributeError):
            pass
        logger.warning("Gemini API error %d %s: %s", response.status_code, reason, detail)
        return ModelAPIError(response.status_code, reason, detail)

    @staticmethod
    def parse_response(body: Dict[str, Any]) -> ModelResponse:
        """Extract text and citations from a generateContent answer."""
        feedback = body.get("promptFeedback") or {}
        if feedback.get("blockReason"):
            raise ModelAPIError(None, "SAFETY", f"Prompt blocked: {feedback['blockReason']}")

        candidates = body.get("candidates") or []
        if not candidates:
            return ModelResponse(text="")

        candidate = candidates[0] or {}
        content = candidate.get("content") or {}
        text = "".join(
            part.get("text") or ""
            for part in content.get("parts") or []
            if isinstance(part, dict) and not part.get("thought")
        )

        if not text and candidate.get("finishReason") == "SAFETY":
            raise ModelAPIError(None, "SAFETY", "Response blocked by safety filters")

        grounding = candidate.get("groundingMetadata") or {}
        sources = sources_from_grounding_chunks(grounding.get("groundingChunks"))
        return ModelResponse(text=text, sources=sources)
