import asyncio

import pytest

from utils.error_handler import handle_exceptions


def test_sync_function_returns_default_on_error():
    @handle_exceptions(default_value="fallback")
    def explode():
        raise RuntimeError("boom")

    assert explode() == "fallback"


def test_async_function_returns_default_on_error():
    @handle_exceptions(default_value="fallback")
    async def explode():
        raise RuntimeError("boom")

    assert asyncio.run(explode()) == "fallback"


def test_only_listed_error_types_are_absorbed():
    @handle_exceptions(error_types=ValueError, default_value=0)
    async def explode():
        raise KeyError("not absorbed")

    with pytest.raises(KeyError):
        asyncio.run(explode())


def test_wrapped_name_is_preserved():
    @handle_exceptions()
    async def generate_something():
        return 1

    assert generate_something.__name__ == "generate_something"
    assert asyncio.run(generate_something()) == 1
