from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List

from careerdocs.models.generation import GenerationSession

logger = logging.getLogger(__name__)

DRAFT_KEY_PREFIX = "draft:"


@dataclass
class Draft:
    cv_text: str = ""
    job_description: str = ""
    keywords: List[str] = field(default_factory=list)
    cover_letter: str = ""
    short_profile: str = ""


DRAFT_FIELDS = tuple(f.name for f in fields(Draft))


class DraftStore:
    """
    Working copy of one user's generator inputs and outputs.

    Edits only mark the store dirty; nothing reaches the cache until
    persist() is called.
    """

    def __init__(self, cache, owner_id: str, ttl_seconds: int):
        self.cache = cache
        self.owner_id = owner_id
        self.ttl_seconds = ttl_seconds
        self.draft = Draft()
        self.dirty = False

    @property
    def key(self) -> str:
        return f"{DRAFT_KEY_PREFIX}{self.owner_id}"

    @classmethod
    def load(cls, cache, owner_id: str, ttl_seconds: int) -> "DraftStore":
        store = cls(cache, owner_id, ttl_seconds)
        data = cache.get_json(store.key) or {}
        store.draft = Draft(**{k: v for k, v in data.items() if k in DRAFT_FIELDS})
        return store

    def update(self, **changes: Any) -> None:
        unknown = set(changes) - set(DRAFT_FIELDS)
        if unknown:
            raise ValueError(f"Unknown draft fields: {sorted(unknown)}")
        for name, value in changes.items():
            if value is None:
                continue
            if getattr(self.draft, name) != value:
                setattr(self.draft, name, value)
                self.dirty = True

    def clear(self, name: str) -> None:
        if name not in DRAFT_FIELDS:
            raise ValueError(f"Unknown draft field: {name}")
        empty = [] if name == "keywords" else ""
        self.update(**{name: empty})

    def absorb(self, session: GenerationSession) -> None:
        """Copy a session's outputs (partial ones included) into the draft."""
        self.update(
            keywords=list(session.keywords),
            cover_letter=session.cover_letter.text,
            short_profile=session.short_profile.text,
        )

    def persist(self) -> bool:
        if not self.dirty:
            return False
        self.cache.set_json(self.key, asdict(self.draft), ttl_seconds=self.ttl_seconds)
        self.dirty = False
        logger.debug(f"Draft persisted for {self.owner_id}")
        return True

    def discard(self) -> bool:
        """Drop the saved draft and reset the working copy."""
        self.draft = Draft()
        self.dirty = False
        removed = self.cache.delete(self.key)
        logger.debug(f"Draft discarded for {self.owner_id}")
        return removed

    def to_dict(self) -> Dict[str, Any]:
        return {"owner_id": self.owner_id, **asdict(self.draft)}
