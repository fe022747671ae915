"""Named policy documents injected verbatim into every reply prompt.

A policy bundles what the support agent may talk about: a short product
description, the FAQ, and the answering/refusal instructions. Policies are
plain JSON files in ``helpdesk/policies/`` so a deployment switches product
by setting ``HELPDESK_POLICY`` rather than by forking the prompt code.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List

from pydantic import BaseModel, Field

BASE_DIR = Path(__file__).resolve().parent.parent  # helpdesk/
POLICIES_DIR = BASE_DIR / "policies"


class FaqSection(BaseModel):
    title: str
    items: List[str]


class PolicyDocument(BaseModel):
    name: str
    product_description: str
    faq: List[FaqSection]
    instructions: List[str]
    customer_label: str = "Customer"
    agent_label: str = "Support"
    # Title line printed above the FAQ block.
    faq_title: str = Field(default="FAQ")

    @property
    def faq_text(self) -> str:
        """The FAQ block as plain text: ``Title:`` headings and ``- item`` lines."""
        blocks = [self.faq_title]
        for section in self.faq:
            lines = [f"{section.title}:"]
            lines.extend(f"- {item}" for item in section.items)
            blocks.append("\n".join(lines))
        return "\n\n".join(blocks)


def available_policies() -> List[str]:
    return sorted(p.stem for p in POLICIES_DIR.glob("*.json"))


def load_policy_file(path: str | Path) -> PolicyDocument:
    """Load a policy document from an arbitrary JSON file."""
    path = Path(path)
    with path.open(encoding="utf-8") as f:
        data = json.load(f)
    data.setdefault("name", path.stem)
    return PolicyDocument.model_validate(data)


def load_policy(name: str) -> PolicyDocument:
    """Return the shipped policy called ``name``.

    Raises ``KeyError`` if no ``<name>.json`` exists in ``POLICIES_DIR``.
    """
    path = POLICIES_DIR / f"{name}.json"
    if not path.exists():
        raise KeyError(
            f"Unknown policy {name!r}. Available: {', '.join(available_policies())}"
        )
    return load_policy_file(path)
