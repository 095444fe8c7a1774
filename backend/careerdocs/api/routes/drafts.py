from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from careerdocs.config import settings
from careerdocs.models.schemas import DraftPayload, DraftResponse
from careerdocs.services.cache_service import CacheService, get_cache
from careerdocs.services.draft_store import DRAFT_FIELDS, DraftStore

router = APIRouter(prefix="/drafts", tags=["drafts"])


def _load(cache: CacheService, owner_id: str) -> DraftStore:
    return DraftStore.load(cache, owner_id, ttl_seconds=settings.draft_ttl_seconds)


@router.get("/{owner_id}", response_model=DraftResponse)
def get_draft(owner_id: str, cache: CacheService = Depends(get_cache)):
    return _load(cache, owner_id).to_dict()


@router.put("/{owner_id}", response_model=DraftResponse)
def save_draft(owner_id: str, payload: DraftPayload, cache: CacheService = Depends(get_cache)):
    store = _load(cache, owner_id)
    store.update(**payload.model_dump(exclude_none=True))
    store.persist()
    return store.to_dict()


@router.delete("/{owner_id}/{field}", response_model=DraftResponse)
def clear_draft_field(owner_id: str, field: str, cache: CacheService = Depends(get_cache)):
    if field not in DRAFT_FIELDS:
        raise HTTPException(status_code=404, detail=f"Unknown draft field: {field}")
    store = _load(cache, owner_id)
    store.clear(field)
    store.persist()
    return store.to_dict()


@router.delete("/{owner_id}", response_model=DraftResponse)
def discard_draft(owner_id: str, cache: CacheService = Depends(get_cache)):
    store = _load(cache, owner_id)
    if not store.discard():
        raise HTTPException(status_code=404, detail=f"No draft for {owner_id}")
    return store.to_dict()
