"""About tab renderer."""

from __future__ import annotations

import streamlit as st

from persona import CRISIS_RESOURCES


def render_tab() -> None:
    """Render the static about content."""

    col_left, col_right = st.columns(2)
    with col_left:
        st.markdown(
            """
            <div class="about-col about-col-left">
                <h2 class="about-heading" style="font-size: 1.2rem; font-weight: 400">About Talbot</h2>
                <p class="about-text">Talbot is a companion for the space between therapy sessions. Type or speak, and Talbot will listen, reflect and ask the kind of questions that help you get to the root of how you feel. Talbot is not a therapist and does not replace professional care.</p>
                <hr>
            </div>
            """,
            unsafe_allow_html=True,
        )
        st.markdown("#### Privacy")
        st.caption(
            "Your profile, documents and conversation stay in this installation's local data folder. "
            "Use the sidebar to export everything or start again."
        )
    with col_right:
        st.markdown("#### If you need help now")
        for service, number in CRISIS_RESOURCES.items():
            st.markdown(f"- **{service}**: {number}")
