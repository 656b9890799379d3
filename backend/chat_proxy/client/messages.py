"""Chat history entries kept by clients."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional

from chat_proxy.utils.timestamps import utc_timestamp

Sender = Literal["user", "bot"]


@dataclass(slots=True)
class ChatMessage:
    """One entry of a conversation, as persisted by the client."""

    text: str
    sender: Sender
    timestamp: str = field(default_factory=utc_timestamp)
    metadata: Optional[Dict[str, Any]] = None
    error: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "sender": self.sender,
            "timestamp": self.timestamp,
            "metadata": self.metadata,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChatMessage":
        sender = data.get("sender")
        if sender not in ("user", "bot"):
            raise ValueError(f"Unknown message sender: {sender!r}")
        return cls(
            text=str(data.get("text", "")),
            sender=sender,
            timestamp=data.get("timestamp") or utc_timestamp(),
            metadata=data.get("metadata"),
            error=bool(data.get("error", False)),
        )
