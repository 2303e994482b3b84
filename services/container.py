"""Composition root: builds the Talbot services in dependency order."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Dict

from agent_selector import GENAI_PROVIDER, OFFLINE_PROVIDER, OPENAI_PROVIDER, PROXY_PROVIDER, provider_options
from app_settings import TalbotSettings
from chat_client import ChatProxyClient
from local_store import LocalStore
from services.context_builder import ContextBuilder
from services.conversation_memory import ConversationMemoryStore
from services.conversation_service import ConversationService
from services.llm_backends import ChatBackend, GeminiBackend, OpenAIBackend, PatternBackend, ProxyBackend
from services.message_log import MessageLog
from services.profile_service import ProfileStore
from services.response_pipeline import ResponsePipeline
from services.safety_service import SafetyService
from services.speech_service import SpeechService
from services.submission_gate import SubmissionGate
from services.transcription_service import TranscriptionService
from speech_client import ElevenLabsClient


logger = logging.getLogger(__name__)


@dataclass
class TalbotServices:
    settings: TalbotSettings
    store: LocalStore
    message_log: MessageLog
    profile_store: ProfileStore
    memory_store: ConversationMemoryStore
    builder: ContextBuilder
    speech: SpeechService
    pipeline: ResponsePipeline
    gate: SubmissionGate
    conversations: ConversationService
    transcription: TranscriptionService
    backends: Dict[str, ChatBackend] = field(default_factory=dict)

    @property
    def provider_options(self) -> list[str]:
        return list(self.backends)

    def select_backend(self, label: str) -> ChatBackend:
        backend = self.backends.get(label) or self.backends[OFFLINE_PROVIDER]
        self.pipeline.use_backend(backend)
        return backend


def build_backends(settings: TalbotSettings, *, rng: random.Random | None = None) -> Dict[str, ChatBackend]:
    available: Dict[str, ChatBackend] = {}
    for label in provider_options(
        proxy_ready=bool(settings.chat_endpoint),
        openai_ready=bool(settings.openai_api_key),
        gemini_ready=bool(settings.genai_api_key),
    ):
        if label == PROXY_PROVIDER:
            available[label] = ProxyBackend(ChatProxyClient(settings.chat_endpoint or "", timeout=settings.request_timeout))
        elif label == OPENAI_PROVIDER:
            available[label] = OpenAIBackend(settings.openai_api_key)
        elif label == GENAI_PROVIDER:
            available[label] = GeminiBackend(settings.genai_api_key)
        elif label == OFFLINE_PROVIDER:
            available[label] = PatternBackend(rng)
    return available


def create_talbot_services(
    settings: TalbotSettings,
    store: LocalStore | None = None,
    *,
    rng: random.Random | None = None,
) -> TalbotServices:
    """Wire every service explicitly and restore persisted state."""

    store = store or LocalStore.open(settings.data_path)
    if not store.durable:
        logger.warning("Running without durable storage; the conversation will not survive a restart.")

    message_log = MessageLog(store)
    message_log.load()
    profile_store = ProfileStore(store)
    profile_store.load()
    memory_store = ConversationMemoryStore(store)
    memory_store.load()

    builder = ContextBuilder(history_window=settings.history_window, token_budget=settings.history_token_budget)
    elevenlabs = (
        ElevenLabsClient(settings.elevenlabs_api_key, timeout=settings.request_timeout)
        if settings.elevenlabs_api_key
        else None
    )
    speech = SpeechService(
        store,
        client=elevenlabs,
        female_voice_id=settings.female_voice_id,
        male_voice_id=settings.male_voice_id,
        development_mode=settings.development_mode,
        disable_elevenlabs_in_dev=settings.disable_elevenlabs_in_dev,
        dev_voice_mode=settings.dev_voice_mode,
        max_text_length=settings.max_tts_text_length,
    )

    backends = build_backends(settings, rng=rng)
    pipeline = ResponsePipeline(
        next(iter(backends.values())),
        builder,
        message_log,
        profile_store,
        memory_store,
        safety=SafetyService(),
        speech=speech,
        rng=rng,
    )
    gate = SubmissionGate(
        message_log,
        profile_store,
        pipeline.handle,
        min_interval=settings.min_send_interval,
        failsafe=settings.send_failsafe,
    )
    conversations = ConversationService(message_log, memory_store, profile_store)
    logger.info(
        "Talbot services ready (messages=%s, profile=%s, memory=%s, backends=%s)",
        len(message_log),
        profile_store.has_profile(),
        memory_store.current is not None,
        ", ".join(backends),
    )
    return TalbotServices(
        settings=settings,
        store=store,
        message_log=message_log,
        profile_store=profile_store,
        memory_store=memory_store,
        builder=builder,
        speech=speech,
        pipeline=pipeline,
        gate=gate,
        conversations=conversations,
        transcription=TranscriptionService(settings.openai_api_key),
        backends=backends,
    )


__all__ = ["TalbotServices", "build_backends", "create_talbot_services"]
