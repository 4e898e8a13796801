"""
Chat Session Dispatcher

Ensures a chat session exists, then posts exactly one message into it.
No retries. Session creation allocates a remote session, so it is
never repeated blindly. A supplied session id is used verbatim.
"""

import logging
from typing import Any

from transport.metis import (
    ChatSession,
    MalformedInput,
    MessageType,
    MetisClient,
    MissingRequiredField,
    encode_path_segment,
)

logger = logging.getLogger(__name__)


class ChatDispatcher:
    """Sends chat messages on behalf of a bot."""

    def __init__(self, client: MetisClient):
        self.client = client

    async def create_session(self, bot_id: str) -> ChatSession:
        """
        Allocate a new session with no user and no initial messages.

        Raises:
            MissingRequiredField: The gateway returned no session id
        """
        response = await self.client.request(
            "POST",
            "/api/v1/chat/sessions",
            {"botId": bot_id, "user": None, "initialMessages": None},
        )
        session_id = str((response or {}).get("id") or "")
        if not session_id:
            raise MissingRequiredField("Failed to create session")

        logger.info(f"Created chat session {session_id}", extra={"bot_id": bot_id})
        return ChatSession(id=session_id, bot_id=(response or {}).get("botId") or bot_id)

    async def send_message(
        self,
        bot_id: str,
        session_id: str | None,
        message_type: MessageType | str,
        content: str,
    ) -> Any:
        """
        Post one message, creating a session first when none is given.

        Returns:
            The gateway's message response, unchanged
        """
        try:
            message_type = MessageType(message_type)
        except ValueError as e:
            raise MalformedInput(f"Unsupported message type: {message_type}") from e

        if not session_id:
            session_id = (await self.create_session(bot_id)).id

        return await self.client.request(
            "POST",
            f"/api/v2/chat/sessions/{encode_path_segment(session_id)}/message",
            {"message": {"type": message_type.value, "content": content}},
        )
