"""Tests for per-message structlog context binding."""

import asyncio

import pytest
from structlog.contextvars import get_contextvars

from truth_sentinel.utils.logging import message_context, new_message_id


class TestMessageContext:
    def test_binds_and_clears(self) -> None:
        with message_context("chat-42", "abc123"):
            context = get_contextvars()
            assert context["message_id"] == "abc123"
            assert context["conversation_id"] == "chat-42"
        assert "message_id" not in get_contextvars()
        assert "conversation_id" not in get_contextvars()

    def test_missing_conversation_not_bound(self) -> None:
        with message_context(None, "abc123"):
            assert "conversation_id" not in get_contextvars()

    @pytest.mark.asyncio
    async def test_tasks_inherit_binding(self) -> None:
        async def read_context() -> dict:
            return get_contextvars()

        with message_context("chat-1", "m-1"):
            context = await asyncio.create_task(read_context())
        assert context["message_id"] == "m-1"


def test_new_message_ids_are_short_and_unique() -> None:
    ids = {new_message_id() for _ in range(50)}
    assert len(ids) == 50
    assert all(len(i) == 12 for i in ids)
