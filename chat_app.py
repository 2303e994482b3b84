"""Streamlit entry point for the Talbot companion."""

from __future__ import annotations

import json
import logging
from datetime import date

import streamlit as st

from agent_selector import init_llm_provider, render_llm_selector
from app_settings import TalbotSettings, load_settings
from models import SendSource
from services.container import TalbotServices, create_talbot_services
from services.errors import SpeechError
from services.speech_service import VOICE_MODE_LABELS, VoiceMode
from tabs import about
from tabs import chat as chat_tab
from tabs import profile as profile_tab
from ui_components import SessionInputBuffer, render_json_viewer, render_metrics_card, toggle_group


logger = logging.getLogger(__name__)

SERVICES_KEY = "talbot_services"
DRAFT_KEY = "chat_draft"
PENDING_SPEECH_KEY = "pending_speech"

CSS = """
.main-title {font-size:2rem !important;font-weight:400 !important;text-align:center;margin:0.5rem 0;}
.welcome {text-align:center;padding:2rem 1rem;opacity:0.9;}
.chat-stream {display:flex;flex-direction:column;gap:0.5rem;max-height:60vh;overflow-y:auto;}
.chat-entry {padding:0.6rem 0.9rem;border-radius:12px;max-width:85%;}
.chat-entry-user {align-self:flex-end;background-color:rgba(120,160,255,0.15);}
.chat-entry-assistant {align-self:flex-start;background-color:rgba(255,255,255,0.06);}
.chat-meta {font-size:0.7rem;opacity:0.6;margin-top:0.2rem;}
"""


def _configure_logging(settings: TalbotSettings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _get_services() -> TalbotServices:
    services = st.session_state.get(SERVICES_KEY)
    if services is None:
        settings = load_settings()
        _configure_logging(settings)
        services = create_talbot_services(settings)
        services.gate.attach_input_buffer(SessionInputBuffer(DRAFT_KEY))
        st.session_state[SERVICES_KEY] = services
    return services


# Send adapters ---------------------------------------------------------------
def _submit(source: SendSource, text_override: str | None = None) -> None:
    services: TalbotServices = st.session_state[SERVICES_KEY]
    decision = services.gate.request_send(source, text_override)
    if decision.accepted and services.pipeline.last_result is not None:
        st.session_state[PENDING_SPEECH_KEY] = services.pipeline.last_result.speech


def _on_enter() -> None:
    _submit(SendSource.ENTER_KEY)


def _on_click() -> None:
    _submit(SendSource.CLICK)


def _handle_voice(services: TalbotServices) -> None:
    if not services.transcription.available:
        return
    audio = st.audio_input("Speak to Talbot", key="voice_input")
    if not audio:
        return
    audio_bytes = audio.getvalue()
    if not services.transcription.is_new_recording(audio_bytes):
        return
    try:
        text = services.transcription.transcribe(audio_bytes)
    except SpeechError as exc:
        logger.warning("Voice input failed: %s", exc)
        st.warning("Sorry, I couldn't catch that. Could you try again or type instead?")
        return
    if text:
        st.caption(f"Heard: {text}")
        _submit(SendSource.VOICE, text)


# New-conversation actions ----------------------------------------------------
def _keep_context() -> None:
    services: TalbotServices = st.session_state[SERVICES_KEY]
    if services.conversations.keep_context():
        st.toast("New conversation started. I'll remember what we talked about.")


def _complete_reset() -> None:
    services: TalbotServices = st.session_state[SERVICES_KEY]
    services.conversations.complete_reset()
    st.toast("Fresh start. Previous conversation and memory cleared.")


def _reset_voice_usage() -> None:
    services: TalbotServices = st.session_state[SERVICES_KEY]
    services.speech.reset_usage()


def _render_sidebar(services: TalbotServices) -> None:
    options = services.provider_options
    init_llm_provider(options)
    services.select_backend(render_llm_selector(options))

    with st.sidebar:
        labels = [VOICE_MODE_LABELS[mode] for mode in VoiceMode]
        choice = toggle_group(
            "Talbot's voice",
            labels,
            key="voice_mode_choice",
            default=VOICE_MODE_LABELS[services.speech.voice_mode],
        )
        selected = VoiceMode(labels.index(choice))
        if selected is not services.speech.voice_mode:
            services.speech.set_voice_mode(selected)

        stats = services.message_log.stats()
        render_metrics_card(
            "This conversation",
            [("Messages", stats.total), ("You", stats.user_count), ("Talbot", stats.assistant_count)],
        )

        memory = services.memory_store.current
        if memory is not None:
            render_json_viewer("What Talbot remembers", memory.asdict())

        with st.expander("Start a new conversation"):
            st.caption(services.conversations.context_preview())
            has_messages = len(services.message_log) > 0
            st.button(
                "Keep context",
                on_click=_keep_context,
                disabled=not has_messages,
                help="Clear the chat but remember topics and themes.",
            )
            st.button(
                "Complete reset",
                on_click=_complete_reset,
                disabled=not has_messages and memory is None,
                help="Clear the chat and everything Talbot remembers.",
            )

        st.download_button(
            "Export my data",
            data=json.dumps(services.conversations.export_data(), indent=2, default=str),
            file_name=f"talbot-data-{date.today().isoformat()}.json",
            mime="application/json",
        )

        with st.expander("Voice usage"):
            st.json(services.speech.usage_stats())
            st.button("Reset usage counter", on_click=_reset_voice_usage)


def _render_chat(services: TalbotServices, notice: str | None) -> None:
    transcript = st.container()

    # Committing the text box and pressing Send can land in the same rerun;
    # the gate keeps only the first of the two requests.
    col_input, col_send = st.columns([6, 1])
    col_input.text_input(
        "Message",
        key=DRAFT_KEY,
        on_change=_on_enter,
        placeholder="Share what's on your mind...",
        label_visibility="collapsed",
    )
    col_send.button("Send", key="send_button", on_click=_on_click, use_container_width=True)
    _handle_voice(services)

    with transcript:
        chat_tab.render_tab(
            services.message_log.all(),
            greeting=services.profile_store.greeting(),
            notice=notice,
        )
        chat_tab.render_playback(st.session_state.pop(PENDING_SPEECH_KEY, None))


def main() -> None:
    """Build the services for this browser session and render the page."""

    st.set_page_config(page_title="Talbot", page_icon="🌿", layout="wide")
    services = _get_services()
    st.markdown(f"<style>{CSS}</style>", unsafe_allow_html=True)
    st.markdown('<h1 class="main-title">Talbot</h1>', unsafe_allow_html=True)

    notice = None
    if not st.session_state.get("memory_notice_shown"):
        st.session_state.memory_notice_shown = True
        notice = services.conversations.memory_notice()

    _render_sidebar(services)

    tabs = st.tabs(["Chat", "Profile", "About"])
    with tabs[0]:
        _render_chat(services, notice)
    with tabs[1]:
        profile_tab.render_tab(services.profile_store)
    with tabs[2]:
        about.render_tab()


if __name__ == "__main__":
    main()
