from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from careerdocs.api.routes.generation import RESULT_KEY_PREFIX
from careerdocs.models.generation import ArtifactKind
from careerdocs.models.schemas import GenerationSnapshot
from careerdocs.services.cache_service import CacheService, get_cache
from careerdocs.services.document_service import DocumentService, GeneratedFile

router = APIRouter(prefix="/generations", tags=["generations"])

ARTIFACT_SLUGS = {
    "cover-letter": ArtifactKind.COVER_LETTER,
    "short-profile": ArtifactKind.SHORT_PROFILE,
}


def get_docs() -> DocumentService:
    return DocumentService()


def _load_result(cache: CacheService, session_id: str) -> dict:
    data = cache.get_json(f"{RESULT_KEY_PREFIX}{session_id}")
    if not data:
        raise HTTPException(status_code=404, detail="Results not found (expired or invalid session id)")
    return data


def _artifact_text(data: dict, slug: str) -> tuple[ArtifactKind, str]:
    kind = ARTIFACT_SLUGS.get(slug)
    if kind is None:
        raise HTTPException(status_code=404, detail=f"Unknown document: {slug}")
    text = data.get(kind.value, "") or ""
    if not text.strip():
        raise HTTPException(status_code=404, detail=f"No {slug} was generated for this session")
    return kind, text


def _attachment(f: GeneratedFile) -> Response:
    return Response(
        content=f.data,
        media_type=f.content_type,
        headers={"Content-Disposition": f'attachment; filename="{f.filename}"'},
    )


@router.get("/{session_id}", response_model=GenerationSnapshot)
def get_generation(session_id: str, cache: CacheService = Depends(get_cache)):
    return GenerationSnapshot(**_load_result(cache, session_id))


@router.get("/{session_id}/download/{slug}.docx")
def download_docx(
    session_id: str,
    slug: str,
    cache: CacheService = Depends(get_cache),
    docs: DocumentService = Depends(get_docs),
):
    kind, text = _artifact_text(_load_result(cache, session_id), slug)
    return _attachment(docs.artifact_docx(kind, text))


@router.get("/{session_id}/download/{slug}.pdf")
def download_pdf(
    session_id: str,
    slug: str,
    cache: CacheService = Depends(get_cache),
    docs: DocumentService = Depends(get_docs),
):
    kind, text = _artifact_text(_load_result(cache, session_id), slug)
    return _attachment(docs.artifact_pdf(kind, text))
