"""
Chat Dispatcher Tests

Session creation happens only when no session id is given, and
exactly one message call follows.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from chat import ChatDispatcher
from transport.metis import MalformedInput, MessageType, MissingRequiredField


def make_client(responses):
    client = MagicMock()
    client.request = AsyncMock(side_effect=responses)
    return client


class TestSessionCreation:
    @pytest.mark.asyncio
    async def test_empty_session_creates_one_first(self):
        reply = {"id": "msg-1", "content": "hi there"}
        client = make_client([{"id": "sess-9", "botId": "bot_abc"}, reply])

        result = await ChatDispatcher(client).send_message("bot_abc", "", MessageType.USER, "hello")

        assert result == reply
        calls = client.request.call_args_list
        assert len(calls) == 2
        assert calls[0].args == (
            "POST",
            "/api/v1/chat/sessions",
            {"botId": "bot_abc", "user": None, "initialMessages": None},
        )
        assert calls[1].args == (
            "POST",
            "/api/v2/chat/sessions/sess-9/message",
            {"message": {"type": "USER", "content": "hello"}},
        )

    @pytest.mark.asyncio
    async def test_existing_session_reused_without_creation(self):
        client = make_client([{"ok": True}])

        await ChatDispatcher(client).send_message("bot_abc", "sess-1", "TOOL", "{\"result\": 1}")

        assert client.request.await_count == 1
        method, path, body = client.request.call_args.args
        assert path == "/api/v2/chat/sessions/sess-1/message"
        assert body == {"message": {"type": "TOOL", "content": "{\"result\": 1}"}}

    @pytest.mark.asyncio
    async def test_none_session_treated_as_empty(self):
        client = make_client([{"id": "sess-2"}, {}])

        await ChatDispatcher(client).send_message("bot_abc", None, "USER", "x")

        assert client.request.await_count == 2

    @pytest.mark.asyncio
    async def test_creation_without_id_is_fatal(self):
        client = make_client([{}])

        with pytest.raises(MissingRequiredField, match="Failed to create session"):
            await ChatDispatcher(client).send_message("bot_abc", "", "USER", "x")

        assert client.request.await_count == 1

    @pytest.mark.asyncio
    async def test_unknown_message_type_rejected_before_any_call(self):
        client = make_client([])

        with pytest.raises(MalformedInput):
            await ChatDispatcher(client).send_message("bot_abc", "", "SYSTEM", "x")

        client.request.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_session_returns_model(self):
        client = make_client([{"id": "sess-3"}])

        session = await ChatDispatcher(client).create_session("bot_abc")

        assert session.id == "sess-3"
        assert session.bot_id == "bot_abc"
