"""Turns a conversation history into the support agent's next reply."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from helpdesk.llm.policies import PolicyDocument
from helpdesk.llm.prompt_builder import build_prompt
from utils.error_handler import handle_exceptions
from utils.logging import get_logger

logger = get_logger(__name__)

NO_TEXT_FALLBACK = "Sorry, I couldn't generate a response."
ERROR_FALLBACK = "Sorry, there was an issue with the AI response."


class ReplyGenerator:
    """Assemble the prompt and make one chat-completion call.

    ``client`` is an ``openai.AsyncOpenAI`` (or anything exposing the same
    ``chat.completions.create`` coroutine).
    """

    def __init__(self, client: Any, policy: PolicyDocument, model: str):
        self.client = client
        self.policy = policy
        self.model = model

    @handle_exceptions(default_value=ERROR_FALLBACK)
    async def generate_reply(self, history: Iterable[Mapping[str, Any]]) -> str:
        """Return the model's reply to ``history`` (oldest turn first).

        Never raises: API failures resolve to ``ERROR_FALLBACK`` and an empty
        completion to ``NO_TEXT_FALLBACK``.
        """
        history = list(history)
        prompt = build_prompt(history, self.policy)

        logger.info(
            "Calling OpenAI chat completion | model=%s | policy=%s | turns=%d",
            self.model,
            self.policy.name,
            len(history),
        )
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
        )

        if not response.choices:
            return NO_TEXT_FALLBACK
        content = response.choices[0].message.content
        if not content or not content.strip():
            return NO_TEXT_FALLBACK
        return content.strip()
