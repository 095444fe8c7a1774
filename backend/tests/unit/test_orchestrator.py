"""
Unit tests for GenerationOrchestrator
Covers input checks, keyword fallback, stream accumulation, join semantics
and failure handling.
"""

import asyncio
import json

import pytest

from careerdocs.core.orchestrator import GenerationCallbacks, GenerationOrchestrator
from careerdocs.models.generation import (
    ArtifactState,
    ErrorKind,
    GenerationRequest,
    MissingInputError,
    SessionStatus,
    TargetLanguage,
)


def _request(**overrides):
    data = {
        "cv_text": "Senior engineer, 5 years React.",
        "job_description": "Looking for a React developer.",
        "language": TargetLanguage.ENGLISH,
        "max_words": 100,
    }
    data.update(overrides)
    return GenerationRequest(**data)


class Recorder:
    def __init__(self):
        self.keywords = []
        self.cover = []
        self.profile = []
        self.completed = []
        self.errors = []

    def callbacks(self) -> GenerationCallbacks:
        return GenerationCallbacks(
            on_keywords=self.keywords.append,
            on_cover_letter=self.cover.append,
            on_profile=self.profile.append,
            on_complete=self.completed.append,
            on_error=self.errors.append,
        )


async def _wait_for(predicate, attempts: int = 200):
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition never became true")


class TestInputValidation:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "cv_text,job_description",
        [("", "Need Python."), ("Python dev", ""), ("   ", "Need Python."), ("Python dev", "\n\t "), ("", "")],
    )
    async def test_blank_input_raises_without_gateway_calls(self, make_gateway, cv_text, job_description):
        gateway = make_gateway()
        recorder = Recorder()
        orchestrator = GenerationOrchestrator(gateway)

        with pytest.raises(MissingInputError):
            await orchestrator.generate(
                _request(cv_text=cv_text, job_description=job_description),
                recorder.callbacks(),
            )

        assert gateway.call_count == 0
        assert len(recorder.errors) == 1
        assert recorder.errors[0].kind == ErrorKind.MISSING_INPUT
        assert recorder.errors[0].message_key == "errorMissingInputs"
        assert orchestrator.current_session is None


class TestKeywordStep:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "raw",
        ["not json at all", '{"skills": ["React"]}', '{"keywords": "React"}', "[]", ""],
    )
    async def test_malformed_keywords_fall_back_to_empty(self, make_gateway, raw):
        gateway = make_gateway(keywords_raw=raw, cover=["Letter"], profile=["Profile"])
        recorder = Recorder()

        session = await GenerationOrchestrator(gateway).generate(_request(), recorder.callbacks())

        assert session.keywords == []
        assert recorder.keywords == [[]]
        assert len(gateway.stream_prompts) == 2
        assert session.status == SessionStatus.COMPLETE

    @pytest.mark.asyncio
    async def test_keywords_published_before_streaming(self, make_gateway):
        gateway = make_gateway(
            keywords_raw=json.dumps({"keywords": ["React", "TypeScript"]}),
            cover=["a"],
            profile=["b"],
        )
        order = []
        callbacks = GenerationCallbacks(
            on_keywords=lambda kw: order.append(("keywords", kw)),
            on_cover_letter=lambda text: order.append(("cover", text)),
            on_profile=lambda text: order.append(("profile", text)),
        )

        await GenerationOrchestrator(gateway).generate(_request(), callbacks)

        assert order[0] == ("keywords", ["React", "TypeScript"])

    @pytest.mark.asyncio
    async def test_keywords_reach_both_prompts(self, make_gateway):
        gateway = make_gateway(
            keywords_raw='{"keywords": ["React", "Redux"]}', cover=["a"], profile=["b"]
        )

        await GenerationOrchestrator(gateway).generate(_request())

        cover_prompt = next(p for p in gateway.stream_prompts if not gateway.is_profile_prompt(p))
        profile_prompt = next(p for p in gateway.stream_prompts if gateway.is_profile_prompt(p))
        assert "React, Redux" in cover_prompt
        assert "React, Redux" in profile_prompt
        assert "Looking for a React developer." in cover_prompt
        assert "Looking for a React developer." not in profile_prompt

    @pytest.mark.asyncio
    async def test_extraction_call_failure_fails_session(self, make_gateway):
        gateway = make_gateway(json_error=ConnectionError("network down"))
        recorder = Recorder()

        session = await GenerationOrchestrator(gateway).generate(_request(), recorder.callbacks())

        assert session.status == SessionStatus.FAILED
        assert gateway.stream_prompts == []
        assert recorder.errors[0].kind == ErrorKind.GENERATION_FAILED
        assert isinstance(recorder.errors[0].cause, ConnectionError)
        assert recorder.completed == []


class TestStreaming:

    @pytest.mark.asyncio
    async def test_fragments_accumulate_in_arrival_order(self, make_gateway):
        gateway = make_gateway(cover=["Hel", "lo, ", "world"], profile=["P"])
        recorder = Recorder()

        session = await GenerationOrchestrator(gateway).generate(_request(), recorder.callbacks())

        assert recorder.cover == ["Hel", "Hello, ", "Hello, world"]
        assert session.cover_letter.text == "Hello, world"

    @pytest.mark.asyncio
    async def test_not_complete_until_both_streams_finish(self, make_gateway):
        gate = asyncio.Event()
        gateway = make_gateway(cover=["Dear team, "], profile=["Profile done"], cover_gate=gate)
        recorder = Recorder()
        orchestrator = GenerationOrchestrator(gateway)

        task = asyncio.create_task(orchestrator.generate(_request(), recorder.callbacks()))
        await _wait_for(
            lambda: orchestrator.current_session is not None
            and orchestrator.current_session.short_profile.state == ArtifactState.COMPLETE
        )

        session = orchestrator.current_session
        assert session.status == SessionStatus.STREAMING
        assert session.cover_letter.state == ArtifactState.STREAMING
        assert recorder.completed == []

        gate.set()
        result = await task

        assert result is session
        assert session.status == SessionStatus.COMPLETE
        assert recorder.completed == [session]

    @pytest.mark.asyncio
    async def test_stream_failure_keeps_partial_output(self, make_gateway):
        gate = asyncio.Event()
        gateway = make_gateway(
            cover=["Dear "],
            profile=["X"],
            cover_error=RuntimeError("quota exceeded"),
            cover_gate=gate,
        )
        recorder = Recorder()
        orchestrator = GenerationOrchestrator(gateway)

        task = asyncio.create_task(orchestrator.generate(_request(), recorder.callbacks()))
        await _wait_for(
            lambda: orchestrator.current_session is not None
            and orchestrator.current_session.short_profile.state == ArtifactState.COMPLETE
        )
        gate.set()
        session = await task

        assert session.status == SessionStatus.FAILED
        assert session.short_profile.text == "X"
        assert session.short_profile.state == ArtifactState.COMPLETE
        assert session.cover_letter.text == "Dear "
        assert session.error is recorder.errors[0]
        assert recorder.errors[0].kind == ErrorKind.GENERATION_FAILED
        assert recorder.errors[0].message_key == "errorGeneric"
        assert isinstance(recorder.errors[0].cause, RuntimeError)
        assert recorder.completed == []

    @pytest.mark.asyncio
    async def test_sibling_stream_runs_to_its_end_after_failure(self, make_gateway):
        gateway = make_gateway(
            cover=["Dear "],
            profile=["one ", "two ", "three"],
            cover_error=RuntimeError("stream broke"),
        )

        session = await GenerationOrchestrator(gateway).generate(_request())

        assert session.status == SessionStatus.FAILED
        assert session.short_profile.text == "one two three"

    @pytest.mark.asyncio
    async def test_end_to_end_scenario(self, make_gateway):
        gateway = make_gateway(
            keywords_raw='{"keywords": ["React", "engineer"]}',
            cover=["Dear team, ", "I am excited..."],
            profile=["Experienced engineer..."],
        )
        recorder = Recorder()

        session = await GenerationOrchestrator(gateway).generate(_request(), recorder.callbacks())

        assert session.keywords == ["React", "engineer"]
        assert session.cover_letter.text == "Dear team, I am excited..."
        assert session.short_profile.text == "Experienced engineer..."
        assert session.status == SessionStatus.COMPLETE
        assert session.error is None
        assert recorder.errors == []


class TestStaleGenerations:

    @pytest.mark.asyncio
    async def test_abandoned_generation_stops_publishing(self, make_gateway):
        gate = asyncio.Event()
        gateway = make_gateway(cover=["first", " second"], profile=["P"], cover_gate=gate)
        recorder = Recorder()
        orchestrator = GenerationOrchestrator(gateway)

        task = asyncio.create_task(orchestrator.generate(_request(), recorder.callbacks()))
        await _wait_for(lambda: recorder.cover == ["first", "first second"])

        orchestrator.abandon()
        gate.set()
        session = await task

        # the session itself still finishes; only the callbacks went quiet
        assert session.status == SessionStatus.COMPLETE
        assert recorder.completed == []
        assert recorder.cover == ["first", "first second"]

    @pytest.mark.asyncio
    async def test_new_generation_supersedes_previous(self, make_gateway):
        gate = asyncio.Event()
        slow = make_gateway(cover=["old"], profile=["old profile"], cover_gate=gate)
        fast = make_gateway(cover=["new"], profile=["new profile"])
        old_recorder, new_recorder = Recorder(), Recorder()
        orchestrator = GenerationOrchestrator(slow)

        old_task = asyncio.create_task(orchestrator.generate(_request(), old_recorder.callbacks()))
        await _wait_for(lambda: old_recorder.cover == ["old"])

        orchestrator.gateway = fast
        new_session = await orchestrator.generate(_request(), new_recorder.callbacks())
        gate.set()
        await old_task

        assert orchestrator.current_session is new_session
        assert new_recorder.completed == [new_session]
        assert old_recorder.completed == []

    @pytest.mark.asyncio
    async def test_rejected_call_leaves_running_generation_current(self, make_gateway):
        gate = asyncio.Event()
        gateway = make_gateway(cover=["Dear team"], profile=["P"], cover_gate=gate)
        running, rejected = Recorder(), Recorder()
        orchestrator = GenerationOrchestrator(gateway)

        task = asyncio.create_task(orchestrator.generate(_request(), running.callbacks()))
        await _wait_for(lambda: running.cover == ["Dear team"])

        with pytest.raises(MissingInputError):
            await orchestrator.generate(_request(cv_text="  "), rejected.callbacks())
        gate.set()
        session = await task

        assert session.status == SessionStatus.COMPLETE
        assert running.completed == [session]
        assert [e.kind for e in rejected.errors] == [ErrorKind.MISSING_INPUT]
