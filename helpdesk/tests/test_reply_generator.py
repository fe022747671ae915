import asyncio
from types import SimpleNamespace

import httpx
import openai

from helpdesk.llm.reply_generator import ERROR_FALLBACK, NO_TEXT_FALLBACK, ReplyGenerator

TEST_MODEL = "gpt-test"


def make_completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


HISTORY = [
    {"sender": "user", "text": "What's your return policy?"},
]


def test_reply_is_model_text(generator, fake_openai):
    reply = asyncio.run(generator.generate_reply(HISTORY))

    assert reply == "answer #1"
    call = fake_openai.chat.completions.calls[0]
    assert call["model"] == TEST_MODEL
    # a single user-role message carrying the whole prompt
    assert len(call["messages"]) == 1
    assert call["messages"][0]["role"] == "user"
    assert "Customer: What's your return policy?" in call["messages"][0]["content"]


def test_prompt_includes_full_faq(generator, fake_openai, policy):
    asyncio.run(generator.generate_reply(HISTORY))

    assert policy.faq_text in fake_openai.chat.completions.last_prompt


def test_empty_completion_returns_no_text_fallback(generator, fake_openai):
    fake_openai.chat.completions.response = make_completion(None)
    assert asyncio.run(generator.generate_reply(HISTORY)) == NO_TEXT_FALLBACK

    fake_openai.chat.completions.response = make_completion("   ")
    assert asyncio.run(generator.generate_reply(HISTORY)) == NO_TEXT_FALLBACK

    fake_openai.chat.completions.response = SimpleNamespace(choices=[])
    assert asyncio.run(generator.generate_reply(HISTORY)) == NO_TEXT_FALLBACK


def test_api_error_is_absorbed(generator, fake_openai):
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    fake_openai.chat.completions.error = openai.APIConnectionError(request=request)

    assert asyncio.run(generator.generate_reply(HISTORY)) == ERROR_FALLBACK


def test_any_exception_is_absorbed(generator, fake_openai):
    fake_openai.chat.completions.error = RuntimeError("boom")

    assert asyncio.run(generator.generate_reply(HISTORY)) == ERROR_FALLBACK
    # no retry
    assert len(fake_openai.chat.completions.calls) == 1


def test_generator_accepts_any_history_iterable(fake_openai, policy):
    gen = ReplyGenerator(client=fake_openai, policy=policy, model=TEST_MODEL)

    reply = asyncio.run(gen.generate_reply(iter(HISTORY)))

    assert reply == "answer #1"
    assert "What's your return policy?" in fake_openai.chat.completions.last_prompt
