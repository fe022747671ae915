import sys
from pathlib import Path
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

PROJECT_ROOT = Path(__file__).resolve().parents[2]  # repo root
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from config import Settings  # noqa: E402
from helpdesk.backend.app import create_app  # noqa: E402
from helpdesk.llm.policies import load_policy  # noqa: E402
from helpdesk.llm.reply_generator import ReplyGenerator  # noqa: E402
from helpdesk.memory.crud import ConversationStore  # noqa: E402
from helpdesk.memory.db import init_db, make_engine, make_session_factory  # noqa: E402

TEST_MODEL = "gpt-test"


def make_completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class FakeCompletions:
    """Stands in for ``AsyncOpenAI().chat.completions``; records every call."""

    def __init__(self):
        self.calls = []
        self.error = None
        self.response = None

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        if self.response is not None:
            return self.response
        return make_completion(f"answer #{len(self.calls)}")

    @property
    def last_prompt(self):
        return self.calls[-1]["messages"][0]["content"]


class FakeOpenAI:
    def __init__(self):
        self.chat = SimpleNamespace(completions=FakeCompletions())


@pytest.fixture
def settings():
    return Settings(database_url="sqlite://", openai_api_key="sk-test")


@pytest.fixture
def session_factory():
    engine = make_engine("sqlite://")
    init_db(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture
def store(session_factory):
    return ConversationStore(session_factory)


@pytest.fixture
def policy():
    return load_policy("storefront")


@pytest.fixture
def fake_openai():
    return FakeOpenAI()


@pytest.fixture
def generator(fake_openai, policy):
    return ReplyGenerator(client=fake_openai, policy=policy, model=TEST_MODEL)


@pytest.fixture
def client(settings, store, generator):
    app = create_app(settings, store=store, reply_generator=generator)
    with TestClient(app) as c:
        yield c
