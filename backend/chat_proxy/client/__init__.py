"""Client-side pieces of the chat application."""

from chat_proxy.client.api import ChatApiClient, ChatReply, ServerStatus
from chat_proxy.client.messages import ChatMessage
from chat_proxy.client.session import ChatSession, Notification
from chat_proxy.client.storage import (
    InMemoryMessageStore,
    JsonFileMessageStore,
    MessageStore,
)

__all__ = [
    "ChatApiClient",
    "ChatMessage",
    "ChatReply",
    "ChatSession",
    "InMemoryMessageStore",
    "JsonFileMessageStore",
    "MessageStore",
    "Notification",
    "ServerStatus",
]
