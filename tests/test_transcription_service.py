from __future__ import annotations

from types import SimpleNamespace

import pytest

from services.errors import SpeechError
from services.transcription_service import TranscriptionService, audio_digest, extract_transcript_text


class FakeTranscriptions:
    def __init__(self, result=None, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.calls: list[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.result


def _client(transcriptions: FakeTranscriptions) -> SimpleNamespace:
    return SimpleNamespace(audio=SimpleNamespace(transcriptions=transcriptions))


def test_transcribes_each_recording_once() -> None:
    transcriptions = FakeTranscriptions(SimpleNamespace(text=" I had a rough day "))
    service = TranscriptionService(None, client=_client(transcriptions))

    assert service.available is True
    assert service.transcribe(b"audio-1") == "I had a rough day"
    assert service.transcribe(b"audio-1") is None
    assert service.is_new_recording(b"audio-2") is True
    assert len(transcriptions.calls) == 1
    assert transcriptions.calls[0]["model"] == "whisper-1"
    assert transcriptions.calls[0]["file"].name == "input.wav"


def test_transcription_errors_become_speech_errors() -> None:
    service = TranscriptionService(None, client=_client(FakeTranscriptions(error=RuntimeError("boom"))))

    with pytest.raises(SpeechError):
        service.transcribe(b"audio")


def test_missing_key_is_unavailable() -> None:
    service = TranscriptionService(None)

    assert service.available is False
    with pytest.raises(SpeechError):
        service.transcribe(b"audio")


def test_extract_transcript_text_variants() -> None:
    assert extract_transcript_text({"text": " hi "}) == "hi"
    assert extract_transcript_text({"segments": [{"text": "one"}, {"text": " two"}]}) == "one two"
    assert extract_transcript_text(None) is None
    assert audio_digest(b"abc") == audio_digest(b"abc") != audio_digest(b"abd")
