"""Thin client for the Talbot chat proxy endpoint."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

import requests


def build_chat_request(
    *,
    message: str,
    profile: Mapping[str, Any] | None,
    history: Sequence[Mapping[str, str]],
    system_prompt: str,
) -> dict[str, Any]:
    """Return the JSON body the proxy expects."""

    conversation_history: list[dict[str, str]] = []
    for entry in history:
        sender = str(entry.get("sender") or "")
        content = str(entry.get("content") or "")
        if sender not in {"user", "assistant"} or not content.strip():
            continue
        conversation_history.append({"sender": sender, "content": content})
    return {
        "message": message,
        "profile": dict(profile) if profile else None,
        "conversationHistory": conversation_history,
        "systemPrompt": system_prompt,
    }


@dataclass
class ChatProxyClient:
    """REST client for the stateless chat completion proxy."""

    endpoint: str
    timeout: float = 30

    def __post_init__(self) -> None:
        self.endpoint = self.endpoint.rstrip("/")

    def send(self, payload: Mapping[str, Any]) -> Mapping[str, Any]:
        response = requests.post(
            self.endpoint,
            json=dict(payload),
            headers={"Content-Type": "application/json"},
            timeout=self.timeout,
        )
        response.raise_for_status()
        body = response.json()
        return body if isinstance(body, Mapping) else {}


__all__ = ["ChatProxyClient", "build_chat_request"]
