from __future__ import annotations

"""Streamlit view for the Helpdesk support chat."""

from typing import List

import streamlit as st

from config import get_backend_url
from helpdesk.frontend.api_client import ChatApiClient, ChatApiError

MAX_MESSAGE_LENGTH = 1000

SUGGESTED_QUESTIONS = [
    "What's your return policy?",
    "Do you ship to the USA?",
    "What are your support hours?",
]


def validate_input(text: str) -> str | None:
    """Return an error message for ``text`` or ``None`` if it can be sent.

    Mirrors the backend's checks so obviously bad input never leaves the page.
    """
    if not text or not text.strip():
        return "Message cannot be empty."
    if len(text) > MAX_MESSAGE_LENGTH:
        return f"Message too long (max {MAX_MESSAGE_LENGTH} chars)."
    return None


def _client() -> ChatApiClient:
    return ChatApiClient(get_backend_url())


def _init_state() -> None:
    st.session_state.setdefault("session_id", None)
    st.session_state.setdefault("messages", [])  # list of {"sender", "text"}
    st.session_state.setdefault("history_loaded_for", None)


def _load_history() -> None:
    """Reload the thread from the backend once per session id."""
    session_id = st.session_state.session_id
    if not session_id or st.session_state.history_loaded_for == session_id:
        return
    try:
        st.session_state.messages = _client().fetch_history(session_id)
    except ChatApiError as e:
        st.error(f"Failed to load chat history: {e.message}")
    st.session_state.history_loaded_for = session_id


def _send(text: str) -> None:
    error = validate_input(text)
    if error:
        st.error(error)
        return

    messages: List[dict] = st.session_state.messages
    messages.append({"sender": "user", "text": text})
    try:
        with st.spinner("Agent is typing…"):
            data = _client().send_message(text, st.session_state.session_id)
    except ChatApiError as e:
        st.error(e.message)
        return

    st.session_state.session_id = data["sessionId"]
    # The thread we hold is already current; no need to refetch it.
    st.session_state.history_loaded_for = data["sessionId"]
    messages.append({"sender": "ai", "text": data["reply"]})


def render_chat() -> None:
    st.header("💬 AI Support Chat")
    _init_state()
    _load_history()

    with st.sidebar:
        st.markdown("### Conversation")
        if st.session_state.session_id:
            st.caption(f"Session: `{st.session_state.session_id}`")
        if st.button("New conversation", key="new_conversation_btn"):
            st.session_state.session_id = None
            st.session_state.messages = []
            st.session_state.history_loaded_for = None
            st.rerun()

    pending = None

    if not st.session_state.messages:
        st.markdown("**Try asking:**")
        cols = st.columns(len(SUGGESTED_QUESTIONS))
        for idx, question in enumerate(SUGGESTED_QUESTIONS):
            if cols[idx].button(question, key=f"suggestion_{idx}"):
                pending = question

    user_input = st.chat_input("Type your message...")
    if user_input is not None:
        pending = user_input

    if pending is not None:
        _send(pending)

    for msg in st.session_state.messages:
        role = "user" if msg["sender"] == "user" else "assistant"
        with st.chat_message(role):
            st.markdown(msg["text"])
