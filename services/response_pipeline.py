"""Turn one accepted user message into exactly one assistant reply."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass

from models import Message, Sender
from persona import FALLBACK_RESPONSES
from services.context_builder import ContextBuilder
from services.conversation_memory import ConversationMemoryStore
from services.llm_backends import ChatBackend, ChatRequest
from services.message_log import MessageLog
from services.profile_service import ProfileStore
from services.safety_service import SafetyService
from services.speech_service import SpeechResult, SpeechService


logger = logging.getLogger(__name__)

OUTCOME_CRISIS = "crisis"
OUTCOME_DELIVERED = "delivered"
OUTCOME_FALLBACK = "fallback"


@dataclass(frozen=True)
class PipelineResult:
    text: str
    outcome: str
    message: Message | None = None
    speech: SpeechResult | None = None


class ResponsePipeline:
    """Crisis check, remote call or fallback, filter, deliver.

    Every path ends with renderable text appended to the message log; no
    exception escapes :meth:`handle`.
    """

    def __init__(
        self,
        backend: ChatBackend,
        builder: ContextBuilder,
        message_log: MessageLog,
        profile_store: ProfileStore,
        memory_store: ConversationMemoryStore,
        *,
        safety: SafetyService | None = None,
        speech: SpeechService | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._backend = backend
        self._builder = builder
        self._message_log = message_log
        self._profile_store = profile_store
        self._memory_store = memory_store
        self._safety = safety or SafetyService()
        self._speech = speech
        self._rng = rng or random.Random()
        self.last_result: PipelineResult | None = None

    @property
    def backend(self) -> ChatBackend:
        return self._backend

    def use_backend(self, backend: ChatBackend) -> None:
        if backend is not self._backend:
            logger.info("Response backend switched to %s", getattr(backend, "name", backend))
        self._backend = backend

    def fallback_text(self) -> str:
        return self._rng.choice(FALLBACK_RESPONSES)

    def _remote_reply(self, text: str) -> str:
        context = self._builder.build(text, self._message_log.all(), self._profile_store, self._memory_store)
        profile = self._profile_store.profile
        request = ChatRequest(
            message=context.outgoing_message,
            history=context.history_payload(),
            system_prompt=context.system_prompt(),
            profile=profile.asdict() if profile is not None else None,
        )
        return self._backend.complete(request)

    def handle(self, text: str) -> PipelineResult:
        if self._safety.is_crisis(text):
            logger.warning("Crisis language detected; returning crisis resources without a remote call")
            reply, outcome = self._safety.crisis_response, OUTCOME_CRISIS
        else:
            try:
                raw = self._remote_reply(text)
            except Exception as exc:
                logger.warning("Reply generation failed via %s: %s", getattr(self._backend, "name", "?"), exc)
                reply, outcome = self.fallback_text(), OUTCOME_FALLBACK
            else:
                if raw.strip():
                    self._profile_store.record_reply(raw)
                filtered = self._safety.filter_reply(raw, protected=[self._profile_store.preferred_name])
                if filtered.replaced:
                    logger.info("Filtered disclosure terms from reply: %s", ", ".join(filtered.replaced))
                reply, outcome = filtered.text, OUTCOME_DELIVERED
                if not reply.strip():
                    reply, outcome = self.fallback_text(), OUTCOME_FALLBACK

        message = self._message_log.append(Sender.ASSISTANT, reply)
        self.last_result = PipelineResult(text=reply, outcome=outcome, message=message, speech=self._speak(reply))
        return self.last_result

    def _speak(self, reply: str) -> SpeechResult | None:
        if self._speech is None:
            return None
        try:
            return self._speech.speak(reply)
        except Exception as exc:
            logger.warning("Playback failed: %s", exc)
            return None


__all__ = [
    "OUTCOME_CRISIS",
    "OUTCOME_DELIVERED",
    "OUTCOME_FALLBACK",
    "PipelineResult",
    "ResponsePipeline",
]
