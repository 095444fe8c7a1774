from enum import Enum
from typing import Sequence

from careerdocs.models.generation import TargetLanguage


class PromptVersion(Enum):
    V1 = "v1"


KEYWORD_SCHEMA = {
    "type": "object",
    "properties": {
        "keywords": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["keywords"],
}


def _join_keywords(keywords: Sequence[str]) -> str:
    return ", ".join(keywords) if keywords else "none"


class Prompts:
    """Centralized prompt repository. Versioned prompts for LLM calls."""

    @staticmethod
    def get_keyword_extraction(version: PromptVersion, job_description: str, limit: int = 20) -> str:
        if version == PromptVersion.V1:
            return (
                f"Extract up to {limit} of the most important keywords and skills from the job description below, "
                "most relevant first.\n"
                'Return STRICT JSON of the form {"keywords": ["..."]}.\n'
                f"Job Description:\n{job_description}"
            )
        else:
            raise ValueError(f"Unsupported prompt version: {version}")

    @staticmethod
    def get_cover_letter(
        version: PromptVersion,
        *,
        cv_text: str,
        job_description: str,
        language: TargetLanguage,
        max_words: int,
        keywords: Sequence[str],
    ) -> str:
        if version == PromptVersion.V1:
            return f"""You are an expert cover letter writer. Using the CV and the job description below, write a compelling, professional cover letter.
Instructions:
- Write the entire cover letter in {language.value}.
- Keep the tone professional and enthusiastic.
- Aim for approximately {max_words} words.
- Weave in the experience and skills from the CV that best match the job description.
- Let these job description keywords guide the content: {_join_keywords(keywords)}. Do not bold, highlight or list them; they are thematic guidance only.
- Output only the cover letter text. No introduction, no closing remarks, no markdown.
CV:
{cv_text}
Job Description:
{job_description}"""
        else:
            raise ValueError(f"Unsupported prompt version: {version}")

    @staticmethod
    def get_short_profile(
        version: PromptVersion,
        *,
        cv_text: str,
        language: TargetLanguage,
        keywords: Sequence[str],
    ) -> str:
        if version == PromptVersion.V1:
            return f"""You are an expert career profiler. Using the CV and the job keywords below, write a concise professional profile.
Instructions:
- Write the profile in {language.value}.
- Keep the tone professional and confident.
- Use between 50 and 70 words.
- Highlight the CV experience and skills that align with the keywords.
- Write a single paragraph. No lists or bullet points.
- Output only the profile text. No introduction, no closing remarks, no markdown.
CV:
{cv_text}
Keywords:
{_join_keywords(keywords)}"""
        else:
            raise ValueError(f"Unsupported prompt version: {version}")
