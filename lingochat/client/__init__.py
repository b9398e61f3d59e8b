"""Client module - consume the chat stream"""

from .conversation import ChatMessage, ChatSession, Conversation, ConversationBusyError
from .decoder import SSEStreamDecoder, StreamOutcome
from .stream import ChatAPIError, send_message_stream

__all__ = [
    "ChatAPIError",
    "ChatMessage",
    "ChatSession",
    "Conversation",
    "ConversationBusyError",
    "SSEStreamDecoder",
    "StreamOutcome",
    "send_message_stream",
]
