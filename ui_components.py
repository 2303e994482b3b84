"""Reusable Streamlit UI primitives."""

from __future__ import annotations

import html
import json
from datetime import datetime
from typing import Any, Iterable, Mapping, MutableMapping, Sequence

import streamlit as st

from models import Message, Sender


def sanitize_json_payload(payload: object) -> Mapping[str, Any] | Sequence[Any] | list[Any]:
    """Return a Streamlit-friendly JSON payload."""

    if isinstance(payload, (Mapping, list, tuple)):
        return payload  # type: ignore[return-value]
    if payload is None:
        return {}
    if isinstance(payload, str):
        cleaned = payload.strip()
        if cleaned.startswith("{") or cleaned.startswith("["):
            try:
                return json.loads(cleaned)
            except json.JSONDecodeError:
                return {"text": cleaned}
        return {"text": cleaned}
    return {"value": payload}


def prepare_metric_rows(metrics: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> list[tuple[str, str]]:
    """Normalize metric entries to ``(label, value)`` rows."""

    rows: list[tuple[str, str]] = []
    if isinstance(metrics, Mapping):
        items = metrics.items()
    else:
        items = metrics or []
    for label, value in items:
        if not label:
            continue
        if isinstance(value, bool):
            rows.append((str(label), "yes" if value else "no"))
        elif isinstance(value, int):
            rows.append((str(label), f"{value:,}"))
        elif isinstance(value, float):
            rows.append((str(label), f"{value:.1f}"))
        else:
            rows.append((str(label), str(value)))
    return rows


def format_timestamp(value: datetime | None) -> str:
    if value is None:
        return ""
    return value.astimezone().strftime("%H:%M")


def message_html(message: Message, *, assistant_label: str = "Talbot", user_label: str = "You") -> str:
    """Render one transcript entry as escaped HTML."""

    role = assistant_label if message.sender is Sender.ASSISTANT else user_label
    css = "chat-entry-assistant" if message.sender is Sender.ASSISTANT else "chat-entry-user"
    body = html.escape(message.content).replace("\n", "<br>")
    stamp = format_timestamp(message.timestamp)
    edited = " (edited)" if message.edited else ""
    return (
        f"<div class='chat-entry {css}'><strong>{html.escape(role)}:</strong> {body}"
        f"<div class='chat-meta'>{stamp}{edited}</div></div>"
    )


class SessionInputBuffer:
    """The chat text box as seen by the submission gate."""

    def __init__(self, key: str, state: MutableMapping[str, Any] | None = None) -> None:
        self._key = key
        self._state = state

    @property
    def state(self) -> MutableMapping[str, Any]:
        return self._state if self._state is not None else st.session_state

    def read(self) -> str:
        value = self.state.get(self._key)
        return value if isinstance(value, str) else ""

    def clear(self) -> None:
        self.state[self._key] = ""


def render_json_viewer(
    title: str,
    payload: object,
    *,
    expanded: bool = False,
    st_module=st,
) -> None:
    """Render a collapsible JSON viewer with consistent styling."""

    cleaned = sanitize_json_payload(payload)
    with st_module.expander(title, expanded=expanded):
        st_module.json(cleaned, expanded=expanded)


def render_metrics_card(
    title: str,
    metrics: Mapping[str, Any] | Iterable[tuple[str, Any]],
    *,
    st_module=st,
) -> None:
    """Render a titled metric group."""

    rows = prepare_metric_rows(metrics)
    if not rows:
        return
    st_module.markdown(f"#### {title}")
    columns = st_module.columns(len(rows))
    for column, (label, value) in zip(columns, rows):
        column.metric(label, value)


def toggle_group(
    label: str,
    options: Sequence[str],
    *,
    key: str,
    default: str | None = None,
    help_text: str | None = None,
    st_module=st,
) -> str:
    """Render a segmented toggle and return the selected option."""

    if default and default in options:
        index = options.index(default)
    else:
        index = 0
    return st_module.radio(
        label,
        options,
        index=index,
        help=help_text,
        key=key,
        horizontal=True,
    )


__all__ = [
    "SessionInputBuffer",
    "format_timestamp",
    "message_html",
    "prepare_metric_rows",
    "render_json_viewer",
    "render_metrics_card",
    "sanitize_json_payload",
    "toggle_group",
]
