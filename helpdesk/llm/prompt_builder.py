from __future__ import annotations

"""Prompt construction helpers for the Helpdesk reply generator.

All LLM-facing text should be assembled via this module so we maintain one
single source of truth for the support prompt.

Templates live in ``helpdesk/prompts/`` and use Jinja2 for simple variable
substitution.  Anything more complex than loops / conditionals should be
implemented in Python and passed into the template context as plain data.
"""

from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping

import jinja2

from helpdesk.llm.policies import PolicyDocument

# ---------------------------------------------------------------------------
# Paths & Jinja environment
# ---------------------------------------------------------------------------

BASE_DIR = Path(__file__).resolve().parent.parent  # helpdesk/
PROMPTS_DIR = BASE_DIR / "prompts"
REPLY_TEMPLATE = "reply_prompt.jinja"

# Lazy-initialised Jinja environment so we only pay the cost once.
_ENV: jinja2.Environment | None = None


def _get_env() -> jinja2.Environment:
    global _ENV
    if _ENV is None:
        _ENV = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(PROMPTS_DIR)),
            autoescape=False,  # we do not render HTML
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=jinja2.StrictUndefined,
        )
    return _ENV


# ---------------------------------------------------------------------------
# History helpers
# ---------------------------------------------------------------------------

def label_history(
    history: Iterable[Mapping[str, Any]], policy: PolicyDocument
) -> List[Dict[str, str]]:
    """Map stored ``{"sender", "text"}`` turns to ``{"label", "text"}`` lines.

    Anything that is not a ``user`` turn is rendered with the agent label.
    """
    return [
        {
            "label": policy.customer_label if turn["sender"] == "user" else policy.agent_label,
            "text": turn["text"],
        }
        for turn in history
    ]


# ---------------------------------------------------------------------------
# Public API – build the prompt
# ---------------------------------------------------------------------------

def build_prompt(history: Iterable[Mapping[str, Any]], policy: PolicyDocument) -> str:
    """Return the single-turn prompt sent to the model.

    Parameters
    ----------
    history
        Chat turns, oldest first. Only ``sender`` and ``text`` are read.
    policy
        The policy document whose instructions and FAQ are injected verbatim.
    """
    env = _get_env()
    return env.get_template(REPLY_TEMPLATE).render(
        policy=policy,
        faq=policy.faq_text,
        history=label_history(history, policy),
    )
