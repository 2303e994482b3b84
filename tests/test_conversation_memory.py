from __future__ import annotations

from datetime import datetime, timezone

import pytest

from local_store import CONVERSATION_MEMORY_KEY, LocalStore
from models import ConversationMemory, EmotionalTone, Message, Sender
from services.conversation_memory import (
    ConversationMemoryStore,
    analyze_emotional_tone,
    derive_from,
    extract_key_themes,
    extract_topics,
    to_prompt_text,
)


def _user(text: str) -> Message:
    return Message(sender=Sender.USER, content=text)


def _assistant(text: str) -> Message:
    return Message(sender=Sender.ASSISTANT, content=text)


def test_topics_come_from_user_messages_in_encounter_order() -> None:
    messages = [
        _user("Work has been rough and I can't sleep"),
        _assistant("Tell me about your family and your therapy goals"),
        _user("I'm anxious all the time"),
    ]

    assert extract_topics(messages) == ["work", "sleep", "anxiety"]


def test_tone_ties_break_in_fixed_order() -> None:
    messages = [_user("I feel sad but also angry")]

    assert analyze_emotional_tone(messages) is EmotionalTone.SAD


def test_tone_is_neutral_without_matches() -> None:
    assert analyze_emotional_tone([_user("The weather is mild")]) is EmotionalTone.NEUTRAL
    assert analyze_emotional_tone([_assistant("You sound anxious")]) is EmotionalTone.NEUTRAL


@pytest.mark.parametrize(
    ("text", "theme"),
    [
        ("How do I cope with this?", "coping-strategies"),
        ("I'm trying to be kinder to myself", "therapy-goals"),
        ("My partner and I argued", "relationships"),
        ("My boss keeps piling things on", "work-stress"),
    ],
)
def test_key_themes(text: str, theme: str) -> None:
    assert theme in extract_key_themes([_user(text)])


def test_derive_from_is_deterministic_apart_from_timestamp() -> None:
    messages = [_user("I'm really anxious about work"), _assistant("What about work worries you?")]
    moment = datetime(2025, 5, 1, tzinfo=timezone.utc)

    first = derive_from(messages, now=moment)
    second = derive_from(messages, now=moment)

    assert first == second
    assert first.message_count_at_save == 2
    assert first.topics == ("anxiety", "work")
    assert first.emotional_tone is EmotionalTone.ANXIOUS
    assert first.summary == "Recent discussion about anxiety and related topics"


def test_derive_from_empty_conversation() -> None:
    memory = derive_from([])

    assert memory.topics == ()
    assert memory.summary == "Brief conversation with Talbot"
    assert memory.emotional_tone is EmotionalTone.NEUTRAL


def test_prompt_text_omits_neutral_tone() -> None:
    memory = ConversationMemory(
        last_updated=datetime(2025, 5, 1, tzinfo=timezone.utc),
        message_count_at_save=4,
        topics=("sleep",),
        summary="Recent discussion about sleep and related topics",
        emotional_tone=EmotionalTone.NEUTRAL,
        key_themes=("coping-strategies",),
    )

    text = to_prompt_text(memory)

    assert "Topics previously discussed: sleep." in text
    assert "Key themes from before: coping-strategies." in text
    assert "emotional tone" not in text
    assert to_prompt_text(None) == ""


def test_save_then_load_round_trips(store: LocalStore) -> None:
    memory = derive_from(
        [_user("I'm stressed about my family")],
        now=datetime(2025, 5, 1, 9, 30, tzinfo=timezone.utc),
    )
    ConversationMemoryStore(store).save(memory)

    restored = ConversationMemoryStore(store)

    assert restored.load() == memory
    assert "Previous conversation context" in restored.prompt_text()


def test_clear_removes_persisted_memory(store: LocalStore) -> None:
    memory_store = ConversationMemoryStore(store)
    memory_store.save(derive_from([_user("sleep is hard")]))

    memory_store.clear()

    assert memory_store.current is None
    assert store.get(CONVERSATION_MEMORY_KEY) is None
    assert memory_store.prompt_text() == ""
