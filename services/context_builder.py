"""Assemble the outbound payload from history, profile and memory."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from models import Message, Sender
from persona import SYSTEM_PROMPT
from services.conversation_memory import ConversationMemoryStore
from services.profile_service import ProfileStore


logger = logging.getLogger(__name__)

__all__ = ["ContextBuilder", "OutgoingContext", "estimate_tokens"]


def estimate_tokens(text: str) -> int:
    """Rudimentary token estimate (~4 chars/token)."""

    return max(1, len(text) // 4)


@dataclass(frozen=True)
class OutgoingContext:
    outgoing_message: str
    outgoing_history: tuple[Message, ...] = field(default_factory=tuple)
    profile_context_text: str = ""
    memory_context_text: str = ""

    def history_payload(self) -> list[dict[str, str]]:
        return [message.as_history_entry() for message in self.outgoing_history]

    def system_prompt(self, base: str = SYSTEM_PROMPT) -> str:
        sections = [base]
        if self.profile_context_text:
            sections.append(self.profile_context_text)
        if self.memory_context_text:
            sections.append(f"Conversation Memory:\n{self.memory_context_text}")
        return "\n\n".join(sections)


@dataclass
class ContextBuilder:
    """Read-only projection of the conversation state for one send."""

    history_window: int = 20
    token_budget: int = 6000

    def build(
        self,
        current_message: str,
        log: Sequence[Message],
        profile: ProfileStore | None,
        memory: ConversationMemoryStore | None,
    ) -> OutgoingContext:
        history = list(log)
        # The current message travels in its own field; never send it twice.
        if history and history[-1].sender is Sender.USER and history[-1].content == current_message:
            history.pop()

        if len(history) > self.history_window:
            history = history[-self.history_window :]

        token_total = sum(estimate_tokens(message.content) for message in history)
        dropped = 0
        while history and token_total > self.token_budget:
            token_total -= estimate_tokens(history.pop(0).content)
            dropped += 1
        if dropped:
            logger.warning(
                "Dropped %s oldest history entries to stay within ~%s tokens.", dropped, self.token_budget
            )
        else:
            logger.debug("Outgoing history approx %s tokens across %s entries.", token_total, len(history))

        return OutgoingContext(
            outgoing_message=current_message,
            outgoing_history=tuple(history),
            profile_context_text=profile.context_text() if profile is not None else "",
            memory_context_text=memory.prompt_text() if memory is not None else "",
        )
