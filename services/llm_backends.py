"""Reply generators behind the Response Pipeline."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol, Sequence

import google.generativeai as genai
import requests
from openai import OpenAI

from chat_client import ChatProxyClient, build_chat_request
from persona import DEFAULT_THERAPEUTIC_RESPONSES, RESPONSE_PATTERNS
from services.errors import ChatBackendError


logger = logging.getLogger(__name__)

OPENAI_MODEL = "gpt-3.5-turbo"
GEMINI_MODEL = "gemini-2.0-flash"


@dataclass(frozen=True)
class ChatRequest:
    """Everything a backend needs for one reply."""

    message: str
    history: Sequence[Mapping[str, str]] = field(default_factory=tuple)
    system_prompt: str = ""
    profile: Mapping[str, Any] | None = None


class ChatBackend(Protocol):
    name: str

    def complete(self, request: ChatRequest) -> str: ...


def _require_text(text: Any, backend: str) -> str:
    if not isinstance(text, str) or not text.strip():
        raise ChatBackendError(f"{backend} returned an empty reply")
    return text.strip()


class ProxyBackend:
    """Posts to the hosted chat proxy; honours its ``fallback`` flag."""

    name = "proxy"

    def __init__(self, client: ChatProxyClient) -> None:
        self._client = client

    def complete(self, request: ChatRequest) -> str:
        payload = build_chat_request(
            message=request.message,
            profile=request.profile,
            history=request.history,
            system_prompt=request.system_prompt,
        )
        try:
            body = self._client.send(payload)
        except (requests.RequestException, ValueError) as exc:
            raise ChatBackendError(f"Chat proxy unavailable: {exc}") from exc
        if body.get("fallback"):
            raise ChatBackendError("Chat proxy signalled fallback mode")
        return _require_text(body.get("response"), self.name)


class OpenAIBackend:
    name = "openai"

    def __init__(self, api_key: str | None, *, model: str = OPENAI_MODEL, client: Any | None = None) -> None:
        self._api_key = api_key
        self._model = model
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            if not self._api_key:
                raise ChatBackendError("OpenAI API key missing")
            self._client = OpenAI(api_key=self._api_key)
        return self._client

    def complete(self, request: ChatRequest) -> str:
        messages: list[dict[str, str]] = []
        if request.system_prompt:
            messages.append({"role": "system", "content": request.system_prompt})
        for entry in request.history:
            role = "assistant" if entry.get("sender") == "assistant" else "user"
            messages.append({"role": role, "content": entry.get("content", "")})
        messages.append({"role": "user", "content": request.message})
        try:
            response = self._get_client().chat.completions.create(model=self._model, messages=messages)
        except ChatBackendError:
            raise
        except Exception as exc:
            raise ChatBackendError(f"OpenAI request failed: {exc}") from exc
        return _require_text(response.choices[0].message.content, self.name)


class GeminiBackend:
    name = "gemini"

    def __init__(self, api_key: str | None, *, model: str = GEMINI_MODEL, genai_module: Any | None = None) -> None:
        self._api_key = api_key
        self._model = model
        self._genai = genai_module or genai
        self._configured = False

    def complete(self, request: ChatRequest) -> str:
        if not self._api_key:
            raise ChatBackendError("Gemini API key missing")
        history = [
            {"role": "model" if entry.get("sender") == "assistant" else "user", "parts": [entry.get("content", "")]}
            for entry in request.history
        ]
        try:
            if not self._configured:
                self._genai.configure(api_key=self._api_key)
                self._configured = True
            model = self._genai.GenerativeModel(
                self._model,
                system_instruction=request.system_prompt or None,
            )
            chat = model.start_chat(history=history)
            chunks = [chunk.text for chunk in chat.send_message(request.message, stream=True)]
        except Exception as exc:
            raise ChatBackendError(f"Gemini request failed: {exc}") from exc
        return _require_text("".join(chunks), self.name)


class PatternBackend:
    """Offline responder built from fixed emotion patterns."""

    name = "offline"

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def complete(self, request: ChatRequest) -> str:
        lowered = request.message.lower()
        for keywords, responses in RESPONSE_PATTERNS.values():
            if any(keyword in lowered for keyword in keywords):
                return self._rng.choice(responses)
        return self._rng.choice(DEFAULT_THERAPEUTIC_RESPONSES)


__all__ = [
    "ChatBackend",
    "ChatRequest",
    "GEMINI_MODEL",
    "GeminiBackend",
    "OPENAI_MODEL",
    "OpenAIBackend",
    "PatternBackend",
    "ProxyBackend",
]
