"""Model providers package."""

from .gemini import GeminiClient, InlineImage, ModelRequest, ModelResponse

__all__ = ["GeminiClient", "InlineImage", "ModelRequest", "ModelResponse"]
