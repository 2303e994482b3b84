from __future__ import annotations

import json
from datetime import datetime, timezone

from local_store import LocalStore
from models import EmotionalTone, Profile, Sender
from services.conversation_memory import ConversationMemoryStore
from services.conversation_service import GENERAL_CONTEXT_PREVIEW, NO_CONTEXT_PREVIEW, ConversationService
from services.message_log import MessageLog
from services.profile_service import ProfileStore


FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def _service(store: LocalStore):
    log = MessageLog(store)
    memory = ConversationMemoryStore(store)
    profiles = ProfileStore(store)
    return ConversationService(log, memory, profiles, clock=lambda: FIXED_NOW), log, memory, profiles


def test_keep_context_saves_memory_and_clears_log(store: LocalStore) -> None:
    service, log, memory, _ = _service(store)
    log.append(Sender.USER, "I'm really anxious about work")
    log.append(Sender.ASSISTANT, "What part of work feels heaviest?")

    assert service.keep_context() is True

    assert log.all() == ()
    saved = memory.current
    assert saved is not None
    assert "anxiety" in saved.topics
    assert saved.emotional_tone is EmotionalTone.ANXIOUS
    assert saved.last_updated == FIXED_NOW

    reloaded = ConversationMemoryStore(store)
    assert reloaded.load() == saved


def test_complete_reset_clears_log_and_memory(store: LocalStore) -> None:
    service, log, memory, _ = _service(store)
    log.append(Sender.USER, "I'm really anxious about work")
    service.keep_context()
    log.append(Sender.USER, "back again")

    service.complete_reset()

    assert log.all() == ()
    assert memory.current is None
    assert ConversationMemoryStore(store).load() is None


def test_keep_context_with_empty_log_is_noop(store: LocalStore) -> None:
    service, _, memory, _ = _service(store)

    assert service.keep_context() is False
    assert memory.current is None


def test_context_preview(store: LocalStore) -> None:
    service, log, _, _ = _service(store)
    assert service.context_preview() == NO_CONTEXT_PREVIEW

    log.append(Sender.USER, "hello there")
    assert service.context_preview() == GENERAL_CONTEXT_PREVIEW

    log.append(Sender.USER, "my family, my job, my sleep and my mood")
    assert service.context_preview() == "Recent topics: family, sleep, mood"


def test_memory_notice(store: LocalStore) -> None:
    service, log, _, _ = _service(store)
    assert service.memory_notice() is None

    log.append(Sender.USER, "therapy and medication and sleep and grief")
    service.keep_context()

    assert service.memory_notice() == "I remember we were discussing: therapy, medication, sleep"


def test_export_data_is_json_serialisable(store: LocalStore) -> None:
    service, log, _, profiles = _service(store)
    profiles.save(Profile(preferred_name="Sam"))
    log.append(Sender.USER, "hi")

    exported = service.export_data()

    assert exported["exportDate"] == FIXED_NOW.isoformat()
    assert exported["profile"] == {"preferredName": "Sam"}
    assert exported["messages"][0]["content"] == "hi"
    assert exported["conversationMemory"] is None
    assert exported["stats"]["messageStats"]["total"] == 1
    json.dumps(exported)
