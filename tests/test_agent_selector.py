from __future__ import annotations

from types import SimpleNamespace

import pytest

import agent_selector
from agent_selector import GENAI_PROVIDER, OFFLINE_PROVIDER, OPENAI_PROVIDER, PROXY_PROVIDER, provider_options


class SessionState(dict):
    def __getattr__(self, name):
        return self[name]

    def __setattr__(self, name, value):
        self[name] = value


def test_offline_provider_is_always_last() -> None:
    assert provider_options(proxy_ready=False, openai_ready=False, gemini_ready=False) == [OFFLINE_PROVIDER]
    assert provider_options(proxy_ready=True, openai_ready=True, gemini_ready=True) == [
        PROXY_PROVIDER,
        OPENAI_PROVIDER,
        GENAI_PROVIDER,
        OFFLINE_PROVIDER,
    ]


def test_init_keeps_valid_choice_and_repairs_stale_one(monkeypatch: pytest.MonkeyPatch) -> None:
    state = SessionState(llm_provider=OPENAI_PROVIDER)
    monkeypatch.setattr(agent_selector, "st", SimpleNamespace(session_state=state))

    agent_selector.init_llm_provider([OPENAI_PROVIDER, OFFLINE_PROVIDER])
    assert state["llm_provider"] == OPENAI_PROVIDER

    agent_selector.init_llm_provider([OFFLINE_PROVIDER])
    assert state["llm_provider"] == OFFLINE_PROVIDER
