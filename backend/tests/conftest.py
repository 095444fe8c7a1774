import asyncio
import json
from typing import Any, Dict, Optional, Sequence

import pytest


class FakeGateway:
    """
    In-memory stand-in for GeminiGateway.

    Streams are told apart by their prompt: the profile prompt is the one
    addressed to a "career profiler".
    """

    def __init__(
        self,
        keywords_raw: Any = '{"keywords": []}',
        cover: Sequence[str] = (),
        profile: Sequence[str] = (),
        json_error: Optional[Exception] = None,
        cover_error: Optional[Exception] = None,
        profile_error: Optional[Exception] = None,
        cover_gate: Optional[asyncio.Event] = None,
    ):
        self.keywords_raw = keywords_raw
        self.cover = list(cover)
        self.profile = list(profile)
        self.json_error = json_error
        self.cover_error = cover_error
        self.profile_error = profile_error
        self.cover_gate = cover_gate
        self.json_prompts = []
        self.stream_prompts = []

    @property
    def call_count(self) -> int:
        return len(self.json_prompts) + len(self.stream_prompts)

    @staticmethod
    def is_profile_prompt(prompt: str) -> bool:
        return "career profiler" in prompt

    async def generate_json(self, prompt: str, schema: Dict[str, Any]) -> str:
        self.json_prompts.append(prompt)
        await asyncio.sleep(0)
        if self.json_error is not None:
            raise self.json_error
        return self.keywords_raw

    async def stream_text(self, prompt: str):
        self.stream_prompts.append(prompt)
        if self.is_profile_prompt(prompt):
            fragments, error, gate = self.profile, self.profile_error, None
        else:
            fragments, error, gate = self.cover, self.cover_error, self.cover_gate

        for fragment in fragments:
            await asyncio.sleep(0)
            yield fragment
        if gate is not None:
            await gate.wait()
        if error is not None:
            raise error


class FakeCache:
    """Dict-backed CacheService."""

    def __init__(self):
        self.store: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}

    def get_json(self, key: str):
        val = self.store.get(key)
        return None if val is None else json.loads(val)

    def set_json(self, key: str, value, ttl_seconds: int) -> None:
        self.store[key] = json.dumps(value)
        self.ttls[key] = ttl_seconds

    def delete(self, key: str) -> bool:
        self.ttls.pop(key, None)
        return self.store.pop(key, None) is not None


@pytest.fixture
def make_gateway():
    return FakeGateway


@pytest.fixture
def fake_cache():
    return FakeCache()


def parse_sse(body: str):
    """Split an event-stream body into (event, data) pairs."""
    events = []
    for block in body.strip().split("\n\n"):
        if not block.strip():
            continue
        event, data = None, None
        for line in block.split("\n"):
            if line.startswith("event: "):
                event = line[len("event: "):]
            elif line.startswith("data: "):
                data = json.loads(line[len("data: "):])
        events.append((event, data))
    return events


@pytest.fixture
def sse():
    return parse_sse
