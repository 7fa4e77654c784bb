"""Client side of the turn stream.

Folds decoded events into the list of messages a chat UI displays.
"""

import itertools
from collections import OrderedDict
from contextlib import aclosing
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, AsyncIterable, Dict, Iterable, List, Optional

from ..protocol.codec import EventKind, StreamEvent, decode_stream


class AssistantStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    AWAITING_MESSAGE = "awaiting_message"


@dataclass
class DisplayMessage:
    """One entry of the chat view."""

    id: str
    role: str
    content: str = ""
    data: Optional[Dict[str, Any]] = None
    attachments: List[str] = field(default_factory=list)


class StreamConsumer:
    """Applies turn stream events to an insertion-ordered message map.

    Tool events are upserted by id, so repeated lifecycle updates of one
    call never create duplicate entries.
    """

    def __init__(self, conversation_id: Optional[str] = None):
        self.conversation_id = conversation_id
        self.message_id: Optional[str] = None
        self.messages: "OrderedDict[str, DisplayMessage]" = OrderedDict()
        self.status = AssistantStatus.AWAITING_MESSAGE
        self.error: Optional[str] = None
        self._pending_user_key: Optional[str] = None
        self._current_key: Optional[str] = None
        self._local_ids = itertools.count(1)

    def _local_key(self, prefix: str) -> str:
        return f"local-{prefix}-{next(self._local_ids)}"

    @property
    def message_list(self) -> List[DisplayMessage]:
        return list(self.messages.values())

    def add_user_message(self, text: str, attachments: Iterable[str] = ()) -> DisplayMessage:
        """Show the user's message before the server assigns its id."""
        key = self._local_key("user")
        message = DisplayMessage(id=key, role="user", content=text, attachments=list(attachments))
        self.messages[key] = message
        self._pending_user_key = key
        return message

    def apply(self, event: StreamEvent) -> bool:
        """
        Apply one event.

        Returns:
            False once the stream must stop being consumed
        """
        payload = event.payload

        if event.kind == EventKind.CONTROL:
            self._apply_control(payload)

        elif event.kind == EventKind.MESSAGE_START:
            key = payload.get("id") or self._local_key("assistant")
            self.messages[key] = DisplayMessage(id=key, role=payload.get("role", "assistant"))
            self._current_key = key

        elif event.kind == EventKind.TEXT_DELTA:
            if self._current_key is None or self._current_key not in self.messages:
                key = self._local_key("assistant")
                self.messages[key] = DisplayMessage(id=key, role="assistant")
                self._current_key = key
            self.messages[self._current_key].content += payload.get("value", "")

        elif event.kind == EventKind.TOOL_EVENT:
            key = payload.get("id") or self._local_key("data")
            existing = self.messages.get(key)
            if existing is not None:
                existing.data = payload.get("data")
            else:
                self.messages[key] = DisplayMessage(id=key, role="data", data=payload.get("data"))

        elif event.kind == EventKind.ERROR:
            self._append_error(payload.get("message") or "Unknown error")
            return False

        return True

    def _apply_control(self, payload: Dict[str, Any]):
        conversation_id = payload.get("conversationId")
        if self.conversation_id is None and conversation_id:
            self.conversation_id = conversation_id

        message_id = payload.get("messageId")
        self.message_id = message_id
        old_key = self._pending_user_key
        if not message_id or old_key is None or old_key not in self.messages:
            return

        message = self.messages[old_key]
        message.id = message_id
        self.messages = OrderedDict(
            (message_id if key == old_key else key, value)
            for key, value in self.messages.items()
        )
        self._pending_user_key = None

    def _append_error(self, message: str):
        key = self._local_key("error")
        self.messages[key] = DisplayMessage(id=key, role="error", content=message)
        self.error = message

    async def consume(self, chunks: AsyncIterable[bytes]):
        """
        Consume a whole response body.

        Decode and transport errors become a single error entry; the status
        always returns to awaiting_message.
        """
        self.status = AssistantStatus.IN_PROGRESS
        try:
            async with aclosing(decode_stream(chunks)) as events:
                async for event in events:
                    if not self.apply(event):
                        break
        except Exception as e:
            self._append_error(str(e) or e.__class__.__name__)
        finally:
            self.status = AssistantStatus.AWAITING_MESSAGE
