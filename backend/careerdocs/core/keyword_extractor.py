from __future__ import annotations

import json
import logging
from typing import Any, Dict, List

from pydantic import BaseModel, Field, ValidationError

from careerdocs.config import get_settings
from careerdocs.core.prompts import KEYWORD_SCHEMA, PromptVersion, Prompts
from careerdocs.utils.prometheus_metrics import record_malformed_extraction

logger = logging.getLogger(__name__)


class _KeywordsOut(BaseModel):
    keywords: List[str] = Field(default_factory=list)


def _strip_fences(raw: str) -> str:
    # Gemini occasionally wraps JSON in ```json fences even in JSON mode
    text = raw.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.strip().endswith("```"):
            text = text.rsplit("```", 1)[0]
    return text


def _coerce_json(raw: Any) -> Dict[str, Any]:
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str):
        return json.loads(_strip_fences(raw))
    raise TypeError("Unexpected LLM output type")


def parse_keywords(raw: Any) -> List[str]:
    """Parse the structured keyword response; malformed output yields []."""
    try:
        data = _coerce_json(raw)
        if not isinstance(data, dict):
            raise TypeError("Keyword payload is not a JSON object")
        parsed = _KeywordsOut.model_validate(data)
    except (json.JSONDecodeError, ValidationError, TypeError) as e:
        logger.warning(f"Keyword extraction returned malformed output, continuing without keywords: {e}")
        record_malformed_extraction()
        return []

    return [k.strip() for k in parsed.keywords if k and k.strip()]


async def extract_keywords(gateway, job_description: str) -> List[str]:
    """
    Ask the gateway for the job description's keywords.

    Gateway exceptions propagate; only malformed responses are absorbed.
    """
    prompt = Prompts.get_keyword_extraction(
        PromptVersion.V1,
        job_description.strip(),
        limit=get_settings().keyword_limit,
    )
    raw = await gateway.generate_json(prompt, KEYWORD_SCHEMA)
    keywords = parse_keywords(raw)
    logger.info(f"Extracted {len(keywords)} keywords")
    return keywords
