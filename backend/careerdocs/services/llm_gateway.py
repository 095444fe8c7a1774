from typing import Any, AsyncIterator, Dict
import logging

from google import genai
from google.genai import types

from careerdocs.config import get_settings
from careerdocs.utils.prometheus_metrics import track_llm_call

logger = logging.getLogger(__name__)


class GeminiGateway:
    """
    Thin async wrapper over the Gemini API.

    Two call shapes: a schema-constrained JSON call returning the raw response
    text, and a streaming call yielding text fragments in arrival order.
    No retries: every call is a single attempt.
    """

    def __init__(self, api_key: str | None = None, model: str | None = None):
        settings = get_settings()
        if api_key is None:
            if not settings.gemini_api_key:
                raise RuntimeError("GEMINI_API_KEY is not set")
            api_key = settings.gemini_api_key.get_secret_value()
        self.client = genai.Client(api_key=api_key)
        self.model = model or settings.gemini_model  # e.g. "gemini-2.5-flash"

    async def generate_json(self, prompt: str, schema: Dict[str, Any]) -> str:
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=schema,
        )
        with track_llm_call("keyword_extraction", self.model):
            resp = await self.client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=config,
            )
        # resp.text should be JSON when response_mime_type is application/json
        return resp.text or ""

    async def stream_text(self, prompt: str) -> AsyncIterator[str]:
        with track_llm_call("stream", self.model):
            stream = await self.client.aio.models.generate_content_stream(
                model=self.model,
                contents=prompt,
            )
            async for chunk in stream:
                # chunks carrying only metadata have no text
                if chunk.text:
                    yield chunk.text


class NullGateway:
    """Non-None default for tests/imports. Fails only when called."""

    async def generate_json(self, prompt: str, schema: Dict[str, Any]) -> str:
        raise RuntimeError("LLM not configured. Set GEMINI_API_KEY.")

    async def stream_text(self, prompt: str) -> AsyncIterator[str]:
        raise RuntimeError("LLM not configured. Set GEMINI_API_KEY.")
        yield ""  # pragma: no cover


def get_llm_gateway():
    settings = get_settings()
    if settings.gemini_api_key is None:
        logger.warning("GEMINI_API_KEY not set - generation unavailable")
        return NullGateway()
    return GeminiGateway()
