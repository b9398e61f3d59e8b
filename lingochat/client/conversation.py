"""Client-side conversation state"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable

import aiohttp
from pydantic import BaseModel, Field

from lingochat.client.decoder import StreamOutcome, TokenCallback
from lingochat.client.stream import ChatAPIError, send_message_stream
from lingochat.models.chat import Language, Message, Role, SendMessageRequest

logger = logging.getLogger(__name__)

SendFunction = Callable[..., Awaitable[StreamOutcome]]


class ConversationBusyError(Exception):
    """A stream for this conversation is still open"""


class ChatMessage(Message):
    """Message as displayed by the client"""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    error: str | None = None


class Conversation(BaseModel):
    """Ordered messages plus an optional generated name"""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    name: str | None = None
    messages: list[ChatMessage] = []

    def append(self, role: Role, text: str, language: str) -> ChatMessage:
        message = ChatMessage(role=role, text=text, language=language)
        self.messages.append(message)
        return message

    def user_message_count(self) -> int:
        return sum(1 for message in self.messages if message.role == Role.USER)

    def apply_chat_name(self, chat_name: str | None) -> None:
        """Set the name; a missing name never clears an existing one"""
        if chat_name:
            self.name = chat_name


class ChatSession:
    """Send messages for one conversation, one stream at a time"""

    def __init__(
        self,
        conversation: Conversation | None = None,
        send: SendFunction = send_message_stream,
        **send_options,
    ):
        self.conversation = conversation or Conversation()
        self._send = send
        self._send_options = send_options
        self._in_flight = False

    @property
    def busy(self) -> bool:
        return self._in_flight

    async def send(
        self,
        text: str,
        language: str | Language,
        on_token: TokenCallback | None = None,
        **options,
    ) -> StreamOutcome:
        """Append the user message and an empty assistant message, then stream into it"""
        if self._in_flight:
            raise ConversationBusyError(f"Conversation {self.conversation.id} already has an open stream")
        self._in_flight = True

        try:
            language_tag = Language.resolve(language).value
            history = list(self.conversation.messages)
            self.conversation.append(Role.USER, text, language_tag)
            generate_name = self.conversation.user_message_count() == 1
            assistant = self.conversation.append(Role.ASSISTANT, "", language_tag)

            payload = SendMessageRequest(
                text=text,
                history=history,
                language=language_tag,
                conversation_name=self.conversation.name,
                generate_name=generate_name,
            )

            def handle_token(token: str) -> None:
                assistant.text += token
                if on_token is not None:
                    on_token(token)

            try:
                outcome = await self._send(payload, handle_token, **{**self._send_options, **options})
            except ChatAPIError as e:
                logger.error("[ChatSession] Request rejected: %s", e)
                assistant.error = str(e)
                raise
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                logger.error("[ChatSession] Request failed: %s", e)
                assistant.error = f"Connection failed: {e}" if str(e) else "Connection failed"
                raise

            if outcome.error:
                assistant.error = outcome.error
            self.conversation.apply_chat_name(outcome.chat_name)
            return outcome
        finally:
            self._in_flight = False
