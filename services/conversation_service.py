"""New-conversation flows and data export."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable

from models import utc_now
from services.conversation_memory import ConversationMemoryStore, derive_from, extract_topics
from services.message_log import MessageLog
from services.profile_service import ProfileStore


logger = logging.getLogger(__name__)

NO_CONTEXT_PREVIEW = "No conversation context to preserve yet."
GENERAL_CONTEXT_PREVIEW = "General conversation topics and emotional context."
PREVIEW_TOPIC_COUNT = 3


class ConversationService:
    """Coordinates resets between the message log and conversation memory."""

    def __init__(
        self,
        message_log: MessageLog,
        memory_store: ConversationMemoryStore,
        profile_store: ProfileStore,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._message_log = message_log
        self._memory_store = memory_store
        self._profile_store = profile_store
        self._clock = clock

    def context_preview(self) -> str:
        messages = self._message_log.all()
        if not messages:
            return NO_CONTEXT_PREVIEW
        topics = extract_topics(messages)[-PREVIEW_TOPIC_COUNT:]
        if not topics:
            return GENERAL_CONTEXT_PREVIEW
        return f"Recent topics: {', '.join(topics)}"

    def keep_context(self) -> bool:
        """Summarise the current conversation, then start a fresh one."""

        messages = self._message_log.all()
        if not messages:
            return False
        memory = derive_from(messages, now=self._clock())
        self._memory_store.save(memory)
        self._message_log.clear()
        logger.info("New conversation started with memory of %s topics", len(memory.topics))
        return True

    def complete_reset(self) -> None:
        self._message_log.clear()
        self._memory_store.clear()
        logger.info("Conversation history and memory cleared")

    def memory_notice(self) -> str | None:
        memory = self._memory_store.current
        if memory is None or not memory.topics:
            return None
        return f"I remember we were discussing: {', '.join(memory.topics[:PREVIEW_TOPIC_COUNT])}"

    def export_data(self) -> dict[str, Any]:
        profile = self._profile_store.profile
        memory = self._memory_store.current
        return {
            "exportDate": self._clock().isoformat(),
            "profile": profile.asdict() if profile is not None else None,
            "messages": [message.asdict() for message in self._message_log.all()],
            "conversationMemory": memory.asdict() if memory is not None else None,
            "stats": {
                "messageStats": self._message_log.stats().asdict(),
                "nameUsage": self._profile_store.name_usage.asdict(),
            },
        }


__all__ = ["ConversationService", "GENERAL_CONTEXT_PREVIEW", "NO_CONTEXT_PREVIEW"]
