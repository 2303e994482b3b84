"""Playback collaborator: voice mode, engine choice and premium usage."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from local_store import ELEVENLABS_CALLS_KEY, VOICE_MODE_KEY, LocalStore
from speech_client import DEFAULT_VOICE_SETTINGS, ElevenLabsClient


logger = logging.getLogger(__name__)

ENGINE_MUTED = "muted"
ENGINE_BROWSER = "browser"
ENGINE_ELEVENLABS = "elevenlabs"


class VoiceMode(IntEnum):
    MUTED = 0
    FEMALE = 1
    MALE = 2


VOICE_MODE_LABELS = {
    VoiceMode.MUTED: "Voice off",
    VoiceMode.FEMALE: "Female voice",
    VoiceMode.MALE: "Male voice",
}

_SUBSTITUTIONS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\.{2,}"), "."),
    (re.compile(r"!{2,}"), "!"),
    (re.compile(r"\?{2,}"), "?"),
    (re.compile(r"\btechniques\b"), "ways that might help"),
    (re.compile(r"\bstrategies\b"), "things you can try"),
    (re.compile(r"\bimplement\b"), "try"),
    (re.compile(r"\butilize\b"), "use"),
    (re.compile(r"^(Here are|These are)"), "Some things that might help are"),
    (re.compile(r"\bAdditionally\b"), "Also"),
    (re.compile(r"\bFurthermore\b"), "And"),
    (re.compile(r"\bHowever\b"), "But"),
)


def make_text_more_natural(text: str) -> str:
    """Soften written phrasing so it sounds conversational when spoken."""

    natural = text or ""
    for pattern, replacement in _SUBSTITUTIONS:
        natural = pattern.sub(replacement, natural)
    return natural


@dataclass(frozen=True)
class SpeechResult:
    engine: str
    text: str = ""
    audio: bytes | None = None
    voice_mode: VoiceMode = VoiceMode.MUTED


class SpeechService:
    def __init__(
        self,
        store: LocalStore,
        *,
        client: ElevenLabsClient | None = None,
        female_voice_id: str,
        male_voice_id: str,
        development_mode: bool = True,
        disable_elevenlabs_in_dev: bool = True,
        dev_voice_mode: int = 0,
        max_text_length: int = 300,
    ) -> None:
        self._store = store
        self._client = client
        self._female_voice_id = female_voice_id
        self._male_voice_id = male_voice_id
        self._development_mode = development_mode
        self._disable_elevenlabs_in_dev = disable_elevenlabs_in_dev
        self._max_text_length = max_text_length
        self._voice_mode = self._coerce_mode(store.get(VOICE_MODE_KEY), default=dev_voice_mode)
        self._call_count = self._coerce_count(store.get(ELEVENLABS_CALLS_KEY))

    @staticmethod
    def _coerce_mode(value: Any, *, default: int) -> VoiceMode:
        for candidate in (value, default):
            try:
                return VoiceMode(int(candidate))
            except (TypeError, ValueError):
                continue
        return VoiceMode.MUTED

    @staticmethod
    def _coerce_count(value: Any) -> int:
        try:
            return max(0, int(value))
        except (TypeError, ValueError):
            return 0

    # Voice mode ----------------------------------------------------------
    @property
    def voice_mode(self) -> VoiceMode:
        return self._voice_mode

    def set_voice_mode(self, mode: int) -> VoiceMode:
        self._voice_mode = self._coerce_mode(mode, default=VoiceMode.MUTED)
        self._store.put(VOICE_MODE_KEY, int(self._voice_mode))
        return self._voice_mode

    def cycle_voice_mode(self) -> VoiceMode:
        return self.set_voice_mode((int(self._voice_mode) + 1) % len(VoiceMode))

    @property
    def elevenlabs_available(self) -> bool:
        return self._client is not None

    def _voice_id(self) -> str:
        return self._female_voice_id if self._voice_mode is VoiceMode.FEMALE else self._male_voice_id

    # Playback ------------------------------------------------------------
    def speak(self, text: str) -> SpeechResult:
        if not text or not text.strip() or self._voice_mode is VoiceMode.MUTED:
            return SpeechResult(engine=ENGINE_MUTED, text=text or "", voice_mode=self._voice_mode)

        natural = make_text_more_natural(text)
        browser = SpeechResult(engine=ENGINE_BROWSER, text=natural, voice_mode=self._voice_mode)
        if self._development_mode and self._disable_elevenlabs_in_dev:
            logger.debug("Development mode: browser voice instead of ElevenLabs")
            return browser
        if len(natural) > self._max_text_length:
            logger.info("Reply is %s chars; using browser voice", len(natural))
            return browser
        if self._client is None:
            return browser

        self._call_count += 1
        self._store.put(ELEVENLABS_CALLS_KEY, self._call_count)
        try:
            audio = self._client.synthesize(natural, self._voice_id(), DEFAULT_VOICE_SETTINGS)
        except Exception as exc:
            logger.warning("ElevenLabs synthesis failed, falling back to browser voice: %s", exc)
            return browser
        logger.info("ElevenLabs call #%s", self._call_count)
        return SpeechResult(engine=ENGINE_ELEVENLABS, text=natural, audio=audio, voice_mode=self._voice_mode)

    # Usage ---------------------------------------------------------------
    def usage_stats(self) -> dict[str, Any]:
        return {
            "totalElevenLabsCalls": self._call_count,
            "developmentMode": self._development_mode,
            "elevenLabsDisabledInDev": self._disable_elevenlabs_in_dev,
            "voiceMode": int(self._voice_mode),
            "femaleVoiceId": self._female_voice_id,
            "maleVoiceId": self._male_voice_id,
        }

    def reset_usage(self) -> None:
        self._call_count = 0
        self._store.put(ELEVENLABS_CALLS_KEY, 0)


__all__ = [
    "ENGINE_BROWSER",
    "ENGINE_ELEVENLABS",
    "ENGINE_MUTED",
    "SpeechResult",
    "SpeechService",
    "VOICE_MODE_LABELS",
    "VoiceMode",
    "make_text_more_natural",
]
