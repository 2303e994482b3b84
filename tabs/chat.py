"""Chat tab renderer."""

from __future__ import annotations

import html
import json
from typing import Sequence

import streamlit as st
import streamlit.components.v1 as components

from models import Message
from persona import WELCOME_TEXT
from services.speech_service import ENGINE_BROWSER, ENGINE_ELEVENLABS, SpeechResult, VoiceMode
from ui_components import message_html


def browser_speech_script(text: str, voice_mode: VoiceMode) -> str:
    """Return a speechSynthesis snippet that reads ``text`` aloud."""

    prefer = "female" if voice_mode is VoiceMode.FEMALE else "male"
    return f"""
    <script>
    const synth = window.parent.speechSynthesis || window.speechSynthesis;
    if (synth) {{
        synth.cancel();
        const utterance = new SpeechSynthesisUtterance({json.dumps(text)});
        utterance.rate = 0.9;
        utterance.pitch = {1.1 if prefer == "female" else 0.9};
        const voices = synth.getVoices().filter(v => v.lang && v.lang.startsWith("en"));
        const match = voices.find(v => v.name.toLowerCase().includes({json.dumps(prefer)}));
        if (match || voices.length) {{ utterance.voice = match || voices[0]; }}
        synth.speak(utterance);
    }}
    </script>
    """


def render_playback(speech: SpeechResult | None) -> None:
    if speech is None:
        return
    if speech.engine == ENGINE_ELEVENLABS and speech.audio:
        st.audio(speech.audio, format="audio/mpeg", autoplay=True)
    elif speech.engine == ENGINE_BROWSER and speech.text:
        components.html(browser_speech_script(speech.text, speech.voice_mode), height=0)


def render_tab(messages: Sequence[Message], *, greeting: str, notice: str | None = None) -> None:
    """Render the transcript, or the welcome placeholder when it is empty."""

    if notice:
        st.info(notice)

    if not messages:
        st.markdown(
            f"<div class='welcome'><h2>{html.escape(greeting)}</h2><p>{html.escape(WELCOME_TEXT)}</p></div>",
            unsafe_allow_html=True,
        )
        return

    stream_html = "".join(message_html(message) for message in messages)
    st.markdown(f"<div class='chat-stream'>{stream_html}</div>", unsafe_allow_html=True)
