from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional, Set, Tuple

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, StreamingResponse
from starlette import status

from careerdocs.config import settings
from careerdocs.core.orchestrator import GenerationCallbacks, GenerationOrchestrator
from careerdocs.models.generation import (
    MESSAGE_KEYS,
    ErrorKind,
    GenerationRequest,
    GenerationSession,
    SessionStatus,
)
from careerdocs.models.schemas import ErrorResponse
from careerdocs.services.cache_service import CacheService, get_cache
from careerdocs.services.draft_store import DraftStore
from careerdocs.services.llm_gateway import get_llm_gateway
from careerdocs.utils.prometheus_metrics import record_error

logger = logging.getLogger(__name__)

router = APIRouter(tags=["generation"])

RESULT_KEY_PREFIX = "generation:result:"

# Generation tasks outlive a disconnected client; keep a reference until done.
_running: Set["asyncio.Task[None]"] = set()

Event = Optional[Tuple[str, Dict[str, Any]]]


def _sse(event: str, data: Dict[str, Any]) -> str:
    return f"event: {event}\ndata: {json.dumps(data, ensure_ascii=False)}\n\n"


def _finished(task: "asyncio.Task[None]") -> None:
    _running.discard(task)
    if not task.cancelled() and task.exception() is not None:
        logger.error("Generation task failed", exc_info=task.exception())


def _store_result(cache: CacheService, session: GenerationSession) -> None:
    try:
        cache.set_json(
            f"{RESULT_KEY_PREFIX}{session.id}",
            session.snapshot(),
            ttl_seconds=settings.cache_ttl_seconds,
        )
    except Exception as exc:
        # downloads become unavailable, the streamed result is still delivered
        logger.warning(f"Could not cache result of generation {session.id}: {exc}")


def _store_draft(cache: CacheService, owner_id: str, req: GenerationRequest, session: GenerationSession) -> None:
    try:
        store = DraftStore.load(cache, owner_id, ttl_seconds=settings.draft_ttl_seconds)
        store.update(cv_text=req.cv_text, job_description=req.job_description)
        store.absorb(session)
        store.persist()
    except Exception as exc:
        logger.warning(f"Could not save draft for {owner_id}: {exc}")


@router.post(
    "/generate",
    responses={status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse}},
)
async def generate(
    req: GenerationRequest,
    owner_id: Optional[str] = None,
    gateway=Depends(get_llm_gateway),
    cache: CacheService = Depends(get_cache),
):
    """
    Stream a cover letter and short profile as Server-Sent Events.

    Events: keywords, cover_letter, profile (accumulated text so far), then
    exactly one of complete / error carrying the final session snapshot.
    With owner_id, inputs and (possibly partial) outputs are saved as that
    user's draft once the generation ends.
    """
    if not req.has_inputs():
        record_error(ErrorKind.MISSING_INPUT.value, "generate")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(
                error=ErrorKind.MISSING_INPUT.value,
                detail=MESSAGE_KEYS[ErrorKind.MISSING_INPUT],
            ).model_dump(),
        )

    queue: "asyncio.Queue[Event]" = asyncio.Queue()
    orchestrator = GenerationOrchestrator(gateway)
    callbacks = GenerationCallbacks(
        on_keywords=lambda keywords: queue.put_nowait(("keywords", {"keywords": keywords})),
        on_cover_letter=lambda text: queue.put_nowait(("cover_letter", {"text": text})),
        on_profile=lambda text: queue.put_nowait(("profile", {"text": text})),
    )

    async def run() -> None:
        try:
            session = await orchestrator.generate(req, callbacks)
            await asyncio.to_thread(_store_result, cache, session)
            if owner_id:
                await asyncio.to_thread(_store_draft, cache, owner_id, req, session)
            event = "complete" if session.status == SessionStatus.COMPLETE else "error"
            queue.put_nowait((event, session.snapshot()))
        finally:
            queue.put_nowait(None)

    async def event_stream():
        task = asyncio.create_task(run())
        _running.add(task)
        task.add_done_callback(_finished)
        try:
            while True:
                item = await queue.get()
                if item is None:
                    break
                event, data = item
                yield _sse(event, data)
            await task
        finally:
            # client went away: stop publishing, let in-flight calls finish
            orchestrator.abandon()

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )
