"""Conversation state for a chat front end, independent of any widget toolkit."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Literal, Optional

from chat_proxy.client.api import ChatApiClient, ServerStatus
from chat_proxy.client.messages import ChatMessage
from chat_proxy.client.storage import MessageStore

logger = logging.getLogger(__name__)

ModelStatus = Literal["loading", "ready", "error"]
Severity = Literal["info", "success", "warning", "error"]


@dataclass(slots=True)
class Notification:
    """A transient message for the user (a snackbar in the browser)."""

    message: str
    severity: Severity = "info"


class ChatSession:
    """Ordered message history plus loading and connection state.

    The history is loaded from ``store`` on creation and written back after
    every change.
    """

    def __init__(self, api: ChatApiClient, store: MessageStore) -> None:
        self._api = api
        self._store = store
        self._messages: List[ChatMessage] = store.load()
        self.model_status: ModelStatus = "loading"
        self.is_loading = False
        self.notification: Optional[Notification] = None

    @property
    def messages(self) -> List[ChatMessage]:
        return list(self._messages)

    @property
    def can_send(self) -> bool:
        return not self.is_loading and self.model_status == "ready"

    def notify(self, message: str, severity: Severity = "info") -> None:
        self.notification = Notification(message=message, severity=severity)

    def dismiss_notification(self) -> None:
        self.notification = None

    async def refresh_status(self) -> ServerStatus:
        """Ask the server whether Ollama is up and the model is loaded."""
        status = await self._api.check_server_status()
        self.model_status = "ready" if status.is_ready else "error"

        if not status.is_ready:
            if status.ollama_status == "connected":
                self.notify("Model is not available", "error")
            else:
                self.notify("The AI server is not available", "error")
        return status

    async def send(self, text: str) -> Optional[ChatMessage]:
        """Send ``text`` and append both sides of the exchange.

        Returns the bot message, or None when the input was ignored (blank
        text, a request already in flight, or a model that is not ready).
        """
        if not text.strip() or not self.can_send:
            return None

        self._append(ChatMessage(text=text, sender="user"))
        self.is_loading = True
        try:
            reply = await self._api.send_message(text)
            bot_message = ChatMessage(
                text=reply.text,
                sender="bot",
                metadata=reply.metadata,
                error=reply.error,
            )
            self._append(bot_message)
            if reply.error:
                self.notify("Error processing message", "error")
            return bot_message
        finally:
            self.is_loading = False

    def clear(self) -> None:
        """Drop the whole conversation, in memory and in the store."""
        self._messages = []
        self._store.clear()
        self.notify("Conversation cleared", "info")

    def copy_message(self, message: ChatMessage) -> str:
        """Return the text to put on the clipboard and confirm it to the user."""
        self.notify("Message copied!", "success")
        return message.text

    def _append(self, message: ChatMessage) -> None:
        self._messages.append(message)
        self._store.save(self._messages)
