"""Persistence backends for chat history."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Protocol, Sequence

from chat_proxy.client.messages import ChatMessage

logger = logging.getLogger(__name__)


class MessageStore(Protocol):
    """Where a chat session keeps its history between runs."""

    def load(self) -> List[ChatMessage]: ...

    def save(self, messages: Sequence[ChatMessage]) -> None: ...

    def clear(self) -> None: ...


class InMemoryMessageStore:
    """Volatile store, mostly useful in tests."""

    def __init__(self, messages: Sequence[ChatMessage] = ()) -> None:
        self._messages = list(messages)

    def load(self) -> List[ChatMessage]:
        return list(self._messages)

    def save(self, messages: Sequence[ChatMessage]) -> None:
        self._messages = list(messages)

    def clear(self) -> None:
        self._messages = []


class JsonFileMessageStore:
    """Keeps the history as a JSON array in a single file."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> List[ChatMessage]:
        if not self._path.is_file():
            return []
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            return [ChatMessage.from_dict(item) for item in raw]
        except (ValueError, TypeError, AttributeError) as exc:
            logger.error("Failed to parse saved messages in %s: %s", self._path, exc)
            return []

    def save(self, messages: Sequence[ChatMessage]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(
            json.dumps([m.to_dict() for m in messages], ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        tmp_path.replace(self._path)

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)
