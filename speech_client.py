"""Thin client for the ElevenLabs text-to-speech API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

import requests

BASE_URL = "https://api.elevenlabs.io/v1"
DEFAULT_MODEL_ID = "eleven_monolingual_v1"
DEFAULT_VOICE_SETTINGS: Mapping[str, Any] = {
    "stability": 0.75,
    "similarity_boost": 0.85,
    "style": 0.6,
    "use_speaker_boost": True,
}


@dataclass
class ElevenLabsClient:
    api_key: str
    base_url: str = BASE_URL
    model_id: str = DEFAULT_MODEL_ID
    timeout: float = 30

    def __post_init__(self) -> None:
        self.base_url = self.base_url.rstrip("/")

    def _headers(self, accept: str) -> dict[str, str]:
        return {
            "Accept": accept,
            "Content-Type": "application/json",
            "xi-api-key": self.api_key,
        }

    def synthesize(
        self,
        text: str,
        voice_id: str,
        voice_settings: Mapping[str, Any] | None = None,
    ) -> bytes:
        """Return MP3 audio for ``text``. HTTP errors propagate."""

        response = requests.post(
            f"{self.base_url}/text-to-speech/{voice_id}",
            json={
                "text": text,
                "model_id": self.model_id,
                "voice_settings": dict(voice_settings or DEFAULT_VOICE_SETTINGS),
            },
            headers=self._headers("audio/mpeg"),
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.content

    def list_voices(self) -> list[Mapping[str, Any]]:
        response = requests.get(
            f"{self.base_url}/voices",
            headers=self._headers("application/json"),
            timeout=self.timeout,
        )
        response.raise_for_status()
        body = response.json()
        voices = body.get("voices") if isinstance(body, Mapping) else None
        return [voice for voice in voices or [] if isinstance(voice, Mapping)]


__all__ = ["DEFAULT_VOICE_SETTINGS", "ElevenLabsClient"]
