"""Speech-to-text for the voice send path (OpenAI Whisper)."""

from __future__ import annotations

import hashlib
import io
import logging
from typing import Any

from openai import OpenAI

from services.errors import SpeechError


logger = logging.getLogger(__name__)

WHISPER_MODEL = "whisper-1"


def audio_digest(audio_bytes: bytes) -> str:
    return hashlib.sha1(audio_bytes).hexdigest()


def extract_transcript_text(transcript: Any) -> str | None:
    if not transcript:
        return None
    direct = getattr(transcript, "text", None)
    if isinstance(direct, str) and direct.strip():
        return direct.strip()
    data = None
    if isinstance(transcript, dict):
        data = transcript
    else:
        for attr in ("model_dump", "dict", "to_dict"):
            method = getattr(transcript, attr, None)
            if callable(method):
                try:
                    candidate = method()
                except TypeError:
                    continue
                if isinstance(candidate, dict):
                    data = candidate
                    break
    if data:
        text = data.get("text")
        if isinstance(text, str) and text.strip():
            return text.strip()
        segments = data.get("segments")
        if isinstance(segments, list):
            combined = " ".join(
                seg.get("text", "").strip() for seg in segments if isinstance(seg, dict) and seg.get("text")
            ).strip()
            if combined:
                return combined
    return None


class TranscriptionService:
    """Turns one finished recording into a transcript, once."""

    def __init__(self, api_key: str | None, *, client: Any | None = None) -> None:
        self._api_key = api_key
        self._client = client
        self._last_digest: str | None = None

    @property
    def available(self) -> bool:
        return self._client is not None or bool(self._api_key)

    def _get_client(self) -> Any:
        if self._client is None:
            if not self._api_key:
                raise SpeechError("OpenAI API key missing; voice input is unavailable.")
            self._client = OpenAI(api_key=self._api_key)
        return self._client

    def is_new_recording(self, audio_bytes: bytes) -> bool:
        return bool(audio_bytes) and audio_digest(audio_bytes) != self._last_digest

    def transcribe(self, audio_bytes: bytes, *, filename: str = "input.wav") -> str | None:
        """Return the transcript, or ``None`` for a recording already handled."""

        if not self.is_new_recording(audio_bytes):
            return None
        self._last_digest = audio_digest(audio_bytes)
        # The OpenAI API expects a file with a name.
        buffer = io.BytesIO(audio_bytes)
        buffer.name = filename
        try:
            transcript = self._get_client().audio.transcriptions.create(model=WHISPER_MODEL, file=buffer)
        except SpeechError:
            raise
        except Exception as exc:
            raise SpeechError(f"Transcription failed: {exc}") from exc
        text = extract_transcript_text(transcript)
        if not text:
            logger.info("Whisper returned an empty transcript")
        return text


__all__ = ["TranscriptionService", "audio_digest", "extract_transcript_text"]
