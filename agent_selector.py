"""Helpers for choosing which backend writes Talbot's replies."""

from __future__ import annotations

from typing import List

import streamlit as st

PROXY_PROVIDER = "Talbot proxy"
OPENAI_PROVIDER = "OpenAI (GPT-3.5)"
GENAI_PROVIDER = "Gemini Flash"
OFFLINE_PROVIDER = "Offline companion"


def provider_options(*, proxy_ready: bool, openai_ready: bool, gemini_ready: bool) -> List[str]:
    options: List[str] = []
    if proxy_ready:
        options.append(PROXY_PROVIDER)
    if openai_ready:
        options.append(OPENAI_PROVIDER)
    if gemini_ready:
        options.append(GENAI_PROVIDER)
    options.append(OFFLINE_PROVIDER)
    return options


def init_llm_provider(options: List[str]) -> None:
    """Ensure the session tracks which provider is active."""

    if st.session_state.get("llm_provider") in options:
        return
    st.session_state.llm_provider = options[0]


def render_llm_selector(options: List[str]) -> str:
    """Render the sidebar control for choosing the reply backend."""

    current = st.session_state.get("llm_provider")
    if current not in options:
        current = options[0]
    selection = st.sidebar.selectbox(
        "Response model",
        options,
        index=options.index(current),
        help="Offline companion replies from built-in patterns and needs no network.",
    )
    if selection != current:
        st.session_state.llm_provider = selection
        st.toast(f"Replies now from {selection}", icon="🤖")
    return selection


__all__ = [
    "GENAI_PROVIDER",
    "OFFLINE_PROVIDER",
    "OPENAI_PROVIDER",
    "PROXY_PROVIDER",
    "init_llm_provider",
    "provider_options",
    "render_llm_selector",
]
