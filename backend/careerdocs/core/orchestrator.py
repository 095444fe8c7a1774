"""
Generation Orchestrator

Sequences one keyword extraction call and two concurrent streaming
generations (cover letter + short profile) against the LLM gateway.

Flow:
1. Reject blank CV / job description before any network call
2. Extract keywords (blocking); malformed output means "no keywords"
3. Stream cover letter and profile at the same time, republishing the
   accumulated text after every fragment
4. Complete once both streams have finished; any gateway error marks the
   session failed and leaves already-streamed text in place

A sibling stream is never cancelled when the other one fails: both run to
their own end before the session is marked failed.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from careerdocs.core.keyword_extractor import extract_keywords
from careerdocs.core.prompts import PromptVersion, Prompts
from careerdocs.models.generation import (
    ErrorKind,
    GenerationError,
    GenerationRequest,
    GenerationSession,
    MissingInputError,
    SessionStatus,
    StreamingArtifact,
)
from careerdocs.utils.prometheus_metrics import (
    record_error,
    record_session_status,
    record_stream_fragment,
)

logger = logging.getLogger(__name__)


def _noop(*args: Any) -> None:
    return None


@dataclass
class GenerationCallbacks:
    """Progress hooks for the presentation layer. All are optional."""

    on_keywords: Callable[[List[str]], None] = _noop
    on_cover_letter: Callable[[str], None] = _noop
    on_profile: Callable[[str], None] = _noop
    on_complete: Callable[[GenerationSession], None] = _noop
    on_error: Callable[[GenerationError], None] = _noop


class GenerationOrchestrator:
    """
    Drives one generation at a time per presentation surface.

    Every generate() call takes a new generation token. Once a newer call
    starts, or abandon() is called, callbacks from the older generation are
    dropped; its network calls are left to finish on their own.
    """

    def __init__(self, gateway):
        self.gateway = gateway
        self.version = PromptVersion.V1
        self.current_session: Optional[GenerationSession] = None
        self._generation = 0

    def abandon(self) -> None:
        """Stop delivering callbacks for the in-flight generation."""
        self._generation += 1

    def is_current(self, token: int) -> bool:
        return token == self._generation

    def _emit(self, token: int, callback: Callable[[Any], None], payload: Any) -> None:
        if not self.is_current(token):
            logger.debug(f"Dropping update from stale generation {token}")
            return
        callback(payload)

    async def generate(
        self,
        request: GenerationRequest,
        callbacks: Optional[GenerationCallbacks] = None,
    ) -> GenerationSession:
        """
        Run keyword extraction and both streaming generations.

        Raises:
            MissingInputError: CV or job description is blank. No gateway
                call is made.

        Returns:
            The session in COMPLETE or FAILED status. Failures are reported
            through callbacks.on_error and session.error, not raised.
        """
        callbacks = callbacks or GenerationCallbacks()

        # rejected calls leave the current generation token untouched
        if not request.has_inputs():
            error = MissingInputError()
            logger.warning("Generation rejected: CV or job description is empty")
            record_error(error.kind.value, "orchestrator")
            callbacks.on_error(error)
            raise error

        self._generation += 1
        token = self._generation

        session = GenerationSession(request=request)
        self.current_session = session
        logger.info(
            f"Generation {session.id} started "
            f"(language={request.language.value}, max_words={request.max_words})"
        )

        try:
            session.status = SessionStatus.EXTRACTING_KEYWORDS
            session.keywords = await extract_keywords(self.gateway, request.job_description)
            self._emit(token, callbacks.on_keywords, list(session.keywords))

            session.status = SessionStatus.STREAMING
            cover_prompt = Prompts.get_cover_letter(
                self.version,
                cv_text=request.cv_text,
                job_description=request.job_description,
                language=request.language,
                max_words=request.max_words,
                keywords=session.keywords,
            )
            profile_prompt = Prompts.get_short_profile(
                self.version,
                cv_text=request.cv_text,
                language=request.language,
                keywords=session.keywords,
            )

            results = await asyncio.gather(
                self._stream(token, session.cover_letter, cover_prompt, callbacks.on_cover_letter),
                self._stream(token, session.short_profile, profile_prompt, callbacks.on_profile),
                return_exceptions=True,
            )
            failures = [r for r in results if isinstance(r, BaseException)]
            for failure in failures[1:]:
                logger.error(f"Generation {session.id}: additional stream failure: {failure!r}")
            if failures:
                raise failures[0]

            session.mark_complete()

        except Exception as e:
            logger.error(f"Generation {session.id} failed: {e}", exc_info=e)
            record_error(type(e).__name__, "orchestrator")
            error = GenerationError(ErrorKind.GENERATION_FAILED, cause=e)
            session.mark_failed(error)
            record_session_status(session.status.value)
            self._emit(token, callbacks.on_error, error)
            return session

        logger.info(f"Generation {session.id} complete")
        record_session_status(session.status.value)
        self._emit(token, callbacks.on_complete, session)
        return session

    async def _stream(
        self,
        token: int,
        artifact: StreamingArtifact,
        prompt: str,
        publish: Callable[[str], None],
    ) -> None:
        artifact.start()
        accumulated = ""
        async for fragment in self.gateway.stream_text(prompt):
            accumulated += fragment
            artifact.publish(accumulated)
            record_stream_fragment(artifact.kind.value)
            self._emit(token, publish, accumulated)
        artifact.finish()
        logger.debug(f"{artifact.kind.value} stream finished ({len(accumulated)} chars)")
