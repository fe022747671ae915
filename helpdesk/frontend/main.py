"""Streamlit entry point.

Run with:
    streamlit run helpdesk/frontend/main.py
"""
import sys
from pathlib import Path

# ``streamlit run`` puts only this folder on sys.path; the repo root is needed
# for ``config`` and ``helpdesk`` when the project is not pip-installed.
_REPO_ROOT = Path(__file__).resolve().parents[2]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

import streamlit as st  # noqa: E402

from helpdesk.frontend import streamlit_view  # noqa: E402

st.set_page_config(page_title="AI Support Chat", page_icon="💬")

streamlit_view.render_chat()
