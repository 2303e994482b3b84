"""Application configuration helpers for the Talbot Streamlit surface."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

import streamlit as st


DEFAULT_FEMALE_VOICE_ID = "M7ya1YbaeFaPXljg9BpK"
DEFAULT_MALE_VOICE_ID = "ZthjuvLPty3kTMaNKVKb"
MIN_SEND_INTERVAL_SECONDS = 0.5
SEND_FAILSAFE_SECONDS = 3.0
HISTORY_WINDOW = 20
HISTORY_TOKEN_BUDGET = 6000
MAX_TEXT_LENGTH_FOR_ELEVENLABS = 300


@dataclass(frozen=True)
class TalbotSettings:
    """Immutable configuration bundle for the companion app."""

    chat_endpoint: str | None
    openai_api_key: str | None
    genai_api_key: str | None
    elevenlabs_api_key: str | None
    female_voice_id: str
    male_voice_id: str
    data_path: str
    development_mode: bool
    disable_elevenlabs_in_dev: bool
    dev_voice_mode: int
    max_tts_text_length: int
    min_send_interval: float
    send_failsafe: float
    history_window: int
    history_token_budget: int
    request_timeout: float
    log_level: str


def _safe_secret(key: str) -> Any:
    """Return a Streamlit secret when available."""

    try:
        return st.secrets.get(key)
    except Exception:
        return None


def _lookup(key: str) -> Any:
    return _safe_secret(key) or os.getenv(key)


def _coerce_bool(value: Any, default: bool = False) -> bool:
    """Parse truthy/falsey strings and primitives into booleans."""

    if isinstance(value, bool):
        return value
    if value is None:
        return default
    if isinstance(value, (int, float)):
        return bool(value)
    text = str(value).strip().lower()
    if not text:
        return default
    if text in {"1", "true", "yes", "on", "enabled", "enable"}:
        return True
    if text in {"0", "false", "no", "off", "disabled", "disable"}:
        return False
    return default


def _coerce_float(value: Any, default: float, *, minimum: float | None = None) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if minimum is not None and number < minimum:
        return default
    return number


def _coerce_int(value: Any, default: int, *, minimum: int | None = None) -> int:
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    if minimum is not None and number < minimum:
        return default
    return number


def load_settings() -> TalbotSettings:
    """Collect runtime configuration from environment and secrets."""

    chat_endpoint = _lookup("TALBOT_CHAT_ENDPOINT")
    dev_voice_mode = _coerce_int(_lookup("TALBOT_DEV_VOICE_MODE"), 0, minimum=0)
    return TalbotSettings(
        chat_endpoint=str(chat_endpoint).strip() or None if chat_endpoint else None,
        openai_api_key=_lookup("OPENAI_API_KEY"),
        genai_api_key=_lookup("API_KEY") or _lookup("GEMINI_API_KEY"),
        elevenlabs_api_key=_lookup("ELEVENLABS_API_KEY"),
        female_voice_id=_lookup("ELEVENLABS_FEMALE_VOICE_ID") or DEFAULT_FEMALE_VOICE_ID,
        male_voice_id=_lookup("ELEVENLABS_MALE_VOICE_ID") or DEFAULT_MALE_VOICE_ID,
        data_path=os.getenv("TALBOT_DATA_PATH", os.path.join(os.getcwd(), "talbot-data")),
        development_mode=_coerce_bool(_lookup("TALBOT_DEVELOPMENT_MODE"), default=True),
        disable_elevenlabs_in_dev=_coerce_bool(_lookup("TALBOT_DISABLE_ELEVENLABS_IN_DEV"), default=True),
        dev_voice_mode=dev_voice_mode if dev_voice_mode <= 2 else 0,
        max_tts_text_length=_coerce_int(
            _lookup("TALBOT_MAX_TTS_TEXT_LENGTH"), MAX_TEXT_LENGTH_FOR_ELEVENLABS, minimum=1
        ),
        min_send_interval=_coerce_float(
            _lookup("TALBOT_MIN_SEND_INTERVAL"), MIN_SEND_INTERVAL_SECONDS, minimum=0.3
        ),
        send_failsafe=_coerce_float(_lookup("TALBOT_SEND_FAILSAFE"), SEND_FAILSAFE_SECONDS, minimum=2.0),
        history_window=_coerce_int(_lookup("TALBOT_HISTORY_WINDOW"), HISTORY_WINDOW, minimum=1),
        history_token_budget=_coerce_int(
            _lookup("TALBOT_HISTORY_TOKEN_BUDGET"), HISTORY_TOKEN_BUDGET, minimum=1
        ),
        request_timeout=_coerce_float(_lookup("TALBOT_REQUEST_TIMEOUT"), 30.0, minimum=1.0),
        log_level=str(os.getenv("LOG_LEVEL", "INFO")).upper(),
    )


__all__ = [
    "DEFAULT_FEMALE_VOICE_ID",
    "DEFAULT_MALE_VOICE_ID",
    "HISTORY_TOKEN_BUDGET",
    "HISTORY_WINDOW",
    "MIN_SEND_INTERVAL_SECONDS",
    "SEND_FAILSAFE_SECONDS",
    "TalbotSettings",
    "load_settings",
]
