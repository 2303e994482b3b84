from __future__ import annotations

import random

import pytest

from local_store import LocalStore
from models import Profile, SendSource, Sender
from persona import CRISIS_RESPONSE, FALLBACK_RESPONSES
from services.context_builder import ContextBuilder
from services.conversation_memory import ConversationMemoryStore
from services.errors import ChatBackendError
from services.llm_backends import ChatRequest
from services.message_log import MessageLog
from services.profile_service import ProfileStore
from services.response_pipeline import OUTCOME_CRISIS, OUTCOME_DELIVERED, OUTCOME_FALLBACK, ResponsePipeline
from services.submission_gate import SubmissionGate


class StubBackend:
    name = "stub"

    def __init__(self, reply: str | None = "I'm here with you.", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.requests: list[ChatRequest] = []

    def complete(self, request: ChatRequest) -> str:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.reply or ""


class StubSpeech:
    def __init__(self, error: Exception | None = None) -> None:
        self.spoken: list[str] = []
        self.error = error

    def speak(self, text: str):
        if self.error is not None:
            raise self.error
        self.spoken.append(text)
        return None


def _pipeline(store: LocalStore, backend: StubBackend, *, speech=None):
    log = MessageLog(store)
    profiles = ProfileStore(store)
    memory = ConversationMemoryStore(store)
    pipeline = ResponsePipeline(
        backend,
        ContextBuilder(),
        log,
        profiles,
        memory,
        speech=speech,
        rng=random.Random(7),
    )
    return pipeline, log, profiles


def test_crisis_message_skips_remote_call(store: LocalStore) -> None:
    backend = StubBackend()
    pipeline, log, _ = _pipeline(store, backend)
    log.append(Sender.USER, "I want to kill myself")

    result = pipeline.handle("I want to kill myself")

    assert result.outcome == OUTCOME_CRISIS
    assert result.text == CRISIS_RESPONSE
    assert "000" in result.text
    assert backend.requests == []
    assert log.last().sender is Sender.ASSISTANT
    assert log.last().content == CRISIS_RESPONSE


def test_success_reply_is_filtered_and_delivered(store: LocalStore) -> None:
    backend = StubBackend(reply="As an AI model made by Anthropic, I hear you.")
    pipeline, log, _ = _pipeline(store, backend)

    result = pipeline.handle("rough day")

    assert result.outcome == OUTCOME_DELIVERED
    assert "Anthropic" not in result.text
    assert "AI model" not in result.text
    assert log.last().content == result.text


@pytest.mark.parametrize(
    "backend",
    [
        StubBackend(error=ChatBackendError("fallback flag")),
        StubBackend(error=ConnectionError("offline")),
        StubBackend(error=ValueError("bad json")),
        StubBackend(reply="   "),
    ],
)
def test_failures_route_to_fallback(store: LocalStore, backend: StubBackend) -> None:
    pipeline, log, profiles = _pipeline(store, backend)

    result = pipeline.handle("hello")

    assert result.outcome == OUTCOME_FALLBACK
    assert result.text in FALLBACK_RESPONSES
    assert log.last().content == result.text
    assert profiles.name_usage.total_usage_count == 0


def test_reply_with_name_resets_pacing(store: LocalStore) -> None:
    backend = StubBackend(reply="That sounds hard, Sam. What happened?")
    pipeline, _, profiles = _pipeline(store, backend)
    profiles.save(Profile(preferred_name="Sam"))
    profiles.note_user_turn()

    pipeline.handle("bad day")

    usage = profiles.name_usage
    assert usage.messages_since_last_name == 0
    assert usage.total_usage_count == 1


def test_request_carries_context_without_duplicate_message(store: LocalStore) -> None:
    backend = StubBackend()
    pipeline, log, profiles = _pipeline(store, backend)
    profiles.save(Profile(preferred_name="Sam"))
    log.append(Sender.USER, "first")
    log.append(Sender.ASSISTANT, "tell me more")
    gate = SubmissionGate(log, profiles, pipeline.handle)

    assert gate.request_send(SendSource.VOICE, "second").accepted is True

    request = backend.requests[0]
    assert request.message == "second"
    assert [entry["content"] for entry in request.history] == ["first", "tell me more"]
    assert "User's name: Sam" in request.system_prompt
    assert request.profile == {"preferredName": "Sam"}
    assert [m.sender for m in log.all()][-2:] == [Sender.USER, Sender.ASSISTANT]


def test_speech_failure_does_not_escape(store: LocalStore) -> None:
    speech = StubSpeech(error=RuntimeError("audio device gone"))
    pipeline, log, _ = _pipeline(store, StubBackend(), speech=speech)

    result = pipeline.handle("hi")

    assert result.outcome == OUTCOME_DELIVERED
    assert result.speech is None
    assert pipeline.last_result is result


def test_reply_is_spoken(store: LocalStore) -> None:
    speech = StubSpeech()
    pipeline, _, _ = _pipeline(store, StubBackend(reply="Breathe with me."), speech=speech)

    pipeline.handle("hi")

    assert speech.spoken == ["Breathe with me."]


def test_use_backend_switches_provider(store: LocalStore) -> None:
    first, second = StubBackend(reply="one"), StubBackend(reply="two")
    pipeline, _, _ = _pipeline(store, first)

    pipeline.use_backend(second)

    assert pipeline.handle("hi").text == "two"
    assert first.requests == []


def test_user_name_matching_vendor_term_is_kept(store: LocalStore) -> None:
    backend = StubBackend(reply="Hi Claude, it's good to hear from you.")
    pipeline, log, profiles = _pipeline(store, backend)
    profiles.save(Profile(preferred_name="Claude"))
    profiles.note_user_turn()
    log.append(Sender.USER, "hello")

    result = pipeline.handle("hello")

    assert result.outcome == OUTCOME_DELIVERED
    assert result.text == "Hi Claude, it's good to hear from you."
    assert profiles.name_usage.messages_since_last_name == 0
    assert profiles.name_usage.total_usage_count == 1
