"""
Domain types for one cover letter / short profile generation.

GenerationRequest is validated once and frozen. GenerationSession and its two
StreamingArtifacts are mutable and live only for the duration of one
generate() call (and whatever the caller keeps around afterwards).
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from careerdocs.config import get_settings


class TargetLanguage(str, Enum):
    ENGLISH = "English"
    GERMAN = "German"
    FRENCH = "French"


class ArtifactKind(str, Enum):
    COVER_LETTER = "cover_letter"
    SHORT_PROFILE = "short_profile"


class ArtifactState(str, Enum):
    EMPTY = "empty"
    STREAMING = "streaming"
    COMPLETE = "complete"


class SessionStatus(str, Enum):
    IDLE = "idle"
    EXTRACTING_KEYWORDS = "extracting_keywords"
    STREAMING = "streaming"
    COMPLETE = "complete"
    FAILED = "failed"


class ErrorKind(str, Enum):
    MISSING_INPUT = "missing_input"
    EXTRACTION_MALFORMED = "extraction_malformed"
    GENERATION_FAILED = "generation_failed"


# Keys into the frontend translation table.
MESSAGE_KEYS: Dict[ErrorKind, str] = {
    ErrorKind.MISSING_INPUT: "errorMissingInputs",
    ErrorKind.EXTRACTION_MALFORMED: "errorGeneric",
    ErrorKind.GENERATION_FAILED: "errorGeneric",
}


class GenerationError(Exception):
    """User-facing generation failure. The real cause stays on `cause`."""

    def __init__(self, kind: ErrorKind, cause: Optional[BaseException] = None):
        self.kind = kind
        self.message_key = MESSAGE_KEYS[kind]
        self.cause = cause
        super().__init__(f"{kind.value}: {cause!r}" if cause else kind.value)


class MissingInputError(GenerationError):
    """Raised before any LLM call when the CV or job description is blank."""

    def __init__(self):
        super().__init__(ErrorKind.MISSING_INPUT)


class GenerationRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    cv_text: str
    job_description: str
    language: TargetLanguage = Field(
        default_factory=lambda: TargetLanguage(get_settings().default_language)
    )
    max_words: int = Field(default_factory=lambda: get_settings().default_max_words, gt=0)

    def has_inputs(self) -> bool:
        return bool(self.cv_text.strip()) and bool(self.job_description.strip())


@dataclass
class StreamingArtifact:
    kind: ArtifactKind
    text: str = ""
    state: ArtifactState = ArtifactState.EMPTY

    def start(self) -> None:
        self.state = ArtifactState.STREAMING

    def publish(self, accumulated: str) -> None:
        # Replaces rather than appends: a clear() mid-stream is overwritten
        # by the next fragment's full accumulated text.
        self.text = accumulated
        self.state = ArtifactState.STREAMING

    def finish(self) -> None:
        self.state = ArtifactState.COMPLETE

    def clear(self) -> None:
        self.text = ""
        self.state = ArtifactState.EMPTY


@dataclass
class GenerationSession:
    request: GenerationRequest
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    keywords: List[str] = field(default_factory=list)
    cover_letter: StreamingArtifact = field(
        default_factory=lambda: StreamingArtifact(ArtifactKind.COVER_LETTER)
    )
    short_profile: StreamingArtifact = field(
        default_factory=lambda: StreamingArtifact(ArtifactKind.SHORT_PROFILE)
    )
    status: SessionStatus = SessionStatus.IDLE
    error: Optional[GenerationError] = None

    def artifact(self, kind: ArtifactKind) -> StreamingArtifact:
        if kind == ArtifactKind.COVER_LETTER:
            return self.cover_letter
        return self.short_profile

    def mark_complete(self) -> None:
        if self.error is not None:
            raise RuntimeError("A failed session cannot be completed")
        if not (
            self.cover_letter.state == ArtifactState.COMPLETE
            and self.short_profile.state == ArtifactState.COMPLETE
        ):
            raise RuntimeError("Both artifacts must be complete first")
        self.status = SessionStatus.COMPLETE

    def mark_failed(self, error: GenerationError) -> None:
        self.error = error
        self.status = SessionStatus.FAILED

    def snapshot(self) -> Dict[str, Any]:
        return {
            "session_id": self.id,
            "status": self.status.value,
            "language": self.request.language.value,
            "max_words": self.request.max_words,
            "keywords": list(self.keywords),
            "cover_letter": self.cover_letter.text,
            "short_profile": self.short_profile.text,
            "error": self.error.message_key if self.error else None,
        }
