"""Derive, persist and render the long-term conversation summary."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Mapping, Sequence

from local_store import CONVERSATION_MEMORY_KEY, LocalStore
from models import ConversationMemory, EmotionalTone, Message, Sender, utc_now


logger = logging.getLogger(__name__)

__all__ = [
    "ConversationMemoryStore",
    "THEME_PATTERNS",
    "TONE_WORDS",
    "TOPIC_VOCABULARY",
    "derive_from",
    "extract_key_themes",
    "extract_topics",
    "analyze_emotional_tone",
    "to_prompt_text",
]

# Topic -> stems that count as a mention of it.
TOPIC_VOCABULARY: dict[str, tuple[str, ...]] = {
    "anxiety": ("anxiety", "anxious"),
    "depression": ("depression", "depressed"),
    "stress": ("stress",),
    "work": ("work", "job"),
    "relationship": ("relationship",),
    "family": ("family",),
    "therapy": ("therapy", "therapist"),
    "medication": ("medication", "meds"),
    "sleep": ("sleep", "insomnia"),
    "mood": ("mood",),
    "panic": ("panic",),
    "social": ("social",),
    "confidence": ("confidence", "confident"),
    "self-esteem": ("self-esteem", "self esteem"),
    "trauma": ("trauma",),
    "grief": ("grief", "grieving"),
    "anger": ("anger", "angry"),
    "fear": ("fear", "afraid", "scared"),
    "worry": ("worry", "worried"),
    "overthinking": ("overthinking",),
    "boundaries": ("boundaries", "boundary"),
    "communication": ("communication",),
    "conflict": ("conflict",),
}

# Iteration order doubles as the tie-break order.
TONE_WORDS: dict[EmotionalTone, tuple[str, ...]] = {
    EmotionalTone.ANXIOUS: ("anxious", "worried", "stress", "panic", "nervous"),
    EmotionalTone.SAD: ("sad", "depressed", "down", "hopeless", "empty"),
    EmotionalTone.ANGRY: ("angry", "frustrated", "mad", "irritated", "annoyed"),
    EmotionalTone.POSITIVE: ("good", "better", "happy", "grateful", "hopeful"),
}

THEME_PATTERNS: dict[str, tuple[str, ...]] = {
    "coping-strategies": ("cope", "manage", "deal with", "handle"),
    "therapy-goals": ("goal", "working on", "trying to", "want to change"),
    "relationships": ("relationship", "partner", "friend", "family"),
    "work-stress": ("work", "job", "boss", "career", "colleague"),
}

SUMMARY_RECENT_MESSAGES = 5


def _user_texts(messages: Iterable[Message]) -> list[str]:
    return [message.content.lower() for message in messages if message.sender is Sender.USER]


def extract_topics(messages: Iterable[Message]) -> list[str]:
    """Return vocabulary topics mentioned by the user, in first-encounter order."""

    topics: list[str] = []
    for text in _user_texts(messages):
        for topic, stems in TOPIC_VOCABULARY.items():
            if topic not in topics and any(stem in text for stem in stems):
                topics.append(topic)
    return topics


def analyze_emotional_tone(messages: Iterable[Message]) -> EmotionalTone:
    counts = {tone: 0 for tone in TONE_WORDS}
    for text in _user_texts(messages):
        for tone, words in TONE_WORDS.items():
            counts[tone] += sum(1 for word in words if word in text)
    best = EmotionalTone.NEUTRAL
    best_count = 0
    for tone in TONE_WORDS:
        if counts[tone] > best_count:
            best, best_count = tone, counts[tone]
    return best


def extract_key_themes(messages: Iterable[Message]) -> list[str]:
    texts = _user_texts(messages)
    return [
        theme
        for theme, patterns in THEME_PATTERNS.items()
        if any(pattern in text for text in texts for pattern in patterns)
    ]


def _summary(messages: Sequence[Message]) -> str:
    recent_user = [message for message in messages if message.sender is Sender.USER][-SUMMARY_RECENT_MESSAGES:]
    if not recent_user:
        return "Brief conversation with Talbot"
    topics = extract_topics(recent_user)
    main_topic = topics[0] if topics else "general wellbeing"
    return f"Recent discussion about {main_topic} and related topics"


def derive_from(messages: Sequence[Message], *, now: datetime | None = None) -> ConversationMemory:
    """Summarise ``messages`` without any remote call.

    Only user-authored content is inspected. Apart from ``last_updated`` the
    result depends solely on ``messages``.
    """

    return ConversationMemory(
        last_updated=now or utc_now(),
        message_count_at_save=len(messages),
        topics=tuple(extract_topics(messages)),
        summary=_summary(messages),
        emotional_tone=analyze_emotional_tone(messages),
        key_themes=tuple(extract_key_themes(messages)),
    )


def to_prompt_text(memory: ConversationMemory | None) -> str:
    if memory is None:
        return ""
    parts: list[str] = []
    if memory.summary:
        parts.append(f"Previous conversation context: {memory.summary}.")
    if memory.topics:
        parts.append(f"Topics previously discussed: {', '.join(memory.topics)}.")
    if memory.emotional_tone is not EmotionalTone.NEUTRAL:
        parts.append(f"Previous emotional tone was {memory.emotional_tone.value}.")
    if memory.key_themes:
        parts.append(f"Key themes from before: {', '.join(memory.key_themes)}.")
    return " ".join(parts)


class ConversationMemoryStore:
    """Persisted conversation memory, independent of the message log."""

    def __init__(self, store: LocalStore) -> None:
        self._store = store
        self._memory: ConversationMemory | None = None

    def load(self) -> ConversationMemory | None:
        raw = self._store.get(CONVERSATION_MEMORY_KEY)
        if isinstance(raw, Mapping):
            self._memory = ConversationMemory.from_dict(raw)
        else:
            self._memory = None
        return self._memory

    def save(self, memory: ConversationMemory) -> bool:
        self._memory = memory
        saved = self._store.put(CONVERSATION_MEMORY_KEY, memory.asdict())
        if not saved:
            logger.warning("Conversation memory kept in memory only; persistence failed.")
        return saved

    def clear(self) -> None:
        self._memory = None
        self._store.remove(CONVERSATION_MEMORY_KEY)

    @property
    def current(self) -> ConversationMemory | None:
        return self._memory

    def prompt_text(self) -> str:
        return to_prompt_text(self._memory)
