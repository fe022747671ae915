import uuid

import pytest
from sqlalchemy.exc import IntegrityError

from helpdesk.memory.models import Message


def _count_messages(session_factory):
    db = session_factory()
    try:
        return db.query(Message).count()
    finally:
        db.close()


def test_create_conversation_issues_unique_ids(store):
    first = store.create_conversation()
    second = store.create_conversation()

    assert first.id != second.id
    uuid.UUID(first.id)  # opaque, but a valid UUID
    assert first.created_at is not None


def test_get_conversation(store):
    conv = store.create_conversation()

    assert store.get_conversation(conv.id).id == conv.id
    assert store.get_conversation(str(uuid.uuid4())) is None


def test_memory_roundtrip(store):
    conv = store.create_conversation()
    store.append_message(conv.id, "user", "Hello there!")
    store.append_message(conv.id, "ai", "Hi! How can I help?")

    hist = store.list_recent_messages(conv.id, limit=10)
    assert len(hist) == 2
    assert hist[0]["sender"] == "user" and "Hello" in hist[0]["text"]
    assert hist[1]["sender"] == "ai"
    assert hist[0]["conversationId"] == conv.id
    assert hist[0]["id"] < hist[1]["id"]


def test_recent_messages_are_last_n_oldest_first(store):
    conv = store.create_conversation()
    for i in range(15):
        store.append_message(conv.id, "user" if i % 2 == 0 else "ai", f"msg {i}")

    recent = store.list_recent_messages(conv.id, limit=10)

    assert [m["text"] for m in recent] == [f"msg {i}" for i in range(5, 15)]


def test_recent_messages_default_limit_is_ten(store):
    conv = store.create_conversation()
    for i in range(12):
        store.append_message(conv.id, "user", f"msg {i}")

    assert len(store.list_recent_messages(conv.id)) == 10


def test_messages_are_scoped_to_their_conversation(store):
    a = store.create_conversation()
    b = store.create_conversation()
    store.append_message(a.id, "user", "for a")
    store.append_message(b.id, "user", "for b")

    assert [m["text"] for m in store.list_messages(a.id)] == ["for a"]
    assert [m["text"] for m in store.list_recent_messages(b.id)] == ["for b"]


def test_list_messages_is_unbounded_and_ascending(store):
    conv = store.create_conversation()
    for i in range(25):
        store.append_message(conv.id, "user", f"msg {i}")

    messages = store.list_messages(conv.id)

    assert len(messages) == 25
    timestamps = [m["timestamp"] for m in messages]
    assert timestamps == sorted(timestamps)
    assert messages[0]["text"] == "msg 0"


def test_unknown_conversation_has_no_messages(store):
    missing = str(uuid.uuid4())

    assert store.list_messages(missing) == []
    assert store.list_recent_messages(missing) == []


def test_append_to_unknown_conversation_violates_foreign_key(store, session_factory):
    with pytest.raises(IntegrityError):
        store.append_message(str(uuid.uuid4()), "user", "orphan")

    assert _count_messages(session_factory) == 0


def test_append_rejects_unknown_sender(store):
    conv = store.create_conversation()

    with pytest.raises(ValueError):
        store.append_message(conv.id, "assistant", "nope")
