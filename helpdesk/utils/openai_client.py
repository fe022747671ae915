"""OpenAI client factory for the Helpdesk backend."""

from typing import Optional

import openai


def get_openai_client(api_key: Optional[str]) -> openai.AsyncOpenAI:
    """Initialize and return an async OpenAI client.

    Retries are disabled: a failed call turns into exactly one fallback reply.

    Raises:
        ValueError: If no API key is given.
    """
    if not api_key:
        raise ValueError(
            "OpenAI API key not found. Please set the OPENAI_API_KEY environment "
            "variable or add it to your .env file."
        )

    return openai.AsyncOpenAI(api_key=api_key, max_retries=0)
