"""Ordered, persisted conversation history."""

from __future__ import annotations

import dataclasses
import logging
from typing import Iterable, Mapping, Sequence

from local_store import CHAT_HISTORY_KEY, LocalStore
from models import Message, MessageStats, Sender


logger = logging.getLogger(__name__)


class MessageLog:
    """Append-ordered list of messages mirrored to the local store.

    Insertion order is chronological order. Every mutation rewrites the
    persisted copy so a reload reproduces the visible history verbatim.
    """

    def __init__(self, store: LocalStore) -> None:
        self._store = store
        self._messages: list[Message] = []

    # Persistence ---------------------------------------------------------
    def load(self) -> None:
        """Restore the last persisted history, replacing anything in memory."""

        raw = self._store.get(CHAT_HISTORY_KEY, [])
        messages: list[Message] = []
        seen: set[str] = set()
        if isinstance(raw, Sequence) and not isinstance(raw, str):
            for entry in raw:
                if not isinstance(entry, Mapping):
                    continue
                message = Message.from_dict(entry)
                if not message.content.strip() or message.id in seen:
                    continue
                seen.add(message.id)
                messages.append(message)
        self._messages = messages
        logger.debug("Loaded %s messages from local store", len(messages))

    def _persist(self) -> None:
        if not self._store.put(CHAT_HISTORY_KEY, [message.asdict() for message in self._messages]):
            logger.warning("Chat history kept in memory only; persistence failed.")

    # Mutations -----------------------------------------------------------
    def append(self, sender: Sender | str, content: str) -> Message | None:
        """Append a new message, or return ``None`` when ``content`` is blank."""

        if not isinstance(content, str) or not content.strip():
            logger.debug("Ignoring append with empty content")
            return None
        message = Message(sender=Sender(sender), content=content)
        self._messages.append(message)
        self._persist()
        return message

    def edit(self, message_id: str, content: str) -> Message | None:
        if not content.strip():
            return None
        for index, message in enumerate(self._messages):
            if message.id == message_id:
                updated = dataclasses.replace(message, content=content, edited=True)
                self._messages[index] = updated
                self._persist()
                return updated
        return None

    def delete(self, message_id: str) -> bool:
        remaining = [message for message in self._messages if message.id != message_id]
        if len(remaining) == len(self._messages):
            return False
        self._messages = remaining
        self._persist()
        return True

    def replace_all(self, messages: Iterable[Message]) -> None:
        """Swap in a new history, dropping blank and duplicate-id entries."""

        cleaned: list[Message] = []
        seen: set[str] = set()
        for message in messages:
            if not message.content.strip() or message.id in seen:
                continue
            seen.add(message.id)
            cleaned.append(message)
        self._messages = cleaned
        self._persist()

    def clear(self) -> None:
        """Empty the log and delete the persisted copy.

        Conversation memory is stored separately and is left untouched.
        """

        self._messages = []
        if not self._store.remove(CHAT_HISTORY_KEY):
            logger.warning("Persisted chat history could not be removed.")

    # Views ---------------------------------------------------------------
    def all(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    @property
    def shows_welcome(self) -> bool:
        """The welcome placeholder is displayed whenever the log is empty."""

        return not self._messages

    def last(self) -> Message | None:
        return self._messages[-1] if self._messages else None

    def stats(self) -> MessageStats:
        user = [message for message in self._messages if message.sender is Sender.USER]
        assistant = [message for message in self._messages if message.sender is Sender.ASSISTANT]

        def average(entries: list[Message]) -> float:
            if not entries:
                return 0.0
            return round(sum(len(entry.content) for entry in entries) / len(entries), 1)

        return MessageStats(
            total=len(self._messages),
            user_count=len(user),
            assistant_count=len(assistant),
            avg_user_len=average(user),
            avg_assistant_len=average(assistant),
            first_timestamp=self._messages[0].timestamp if self._messages else None,
            last_timestamp=self._messages[-1].timestamp if self._messages else None,
        )


__all__ = ["MessageLog"]
