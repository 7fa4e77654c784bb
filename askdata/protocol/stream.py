"""Server side of the turn stream: an async queue of encoded lines."""

import asyncio
from typing import Any, AsyncIterator, Optional

from .codec import EventKind, StreamEvent, encode_event


class TurnStream:
    """Queue-backed emitter that feeds one chunked HTTP response.

    Producers (the run driver and concurrent tool calls) push events with the
    ``send_*`` helpers; the response iterates :meth:`chunks` until
    :meth:`close` pushes the end sentinel.
    """

    def __init__(self):
        self._queue: "asyncio.Queue[Optional[bytes]]" = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, event: StreamEvent) -> None:
        """Encode and enqueue one event."""
        if self._closed:
            return
        self._queue.put_nowait(encode_event(event))

    def send_control(self, conversation_id: str, message_id: str) -> None:
        self.send(StreamEvent(EventKind.CONTROL, {
            "conversationId": conversation_id,
            "messageId": message_id,
        }))

    def send_message_start(self, message_id: str) -> None:
        self.send(StreamEvent(EventKind.MESSAGE_START, {"id": message_id, "role": "assistant"}))

    def send_text_delta(self, value: str) -> None:
        self.send(StreamEvent(EventKind.TEXT_DELTA, {"value": value}))

    def send_tool_event(
        self,
        tool_call_id: str,
        status: str,
        input: Any,
        output: Any,
        name: str
    ) -> None:
        self.send(StreamEvent(EventKind.TOOL_EVENT, {
            "role": "data",
            "id": tool_call_id,
            "data": {
                "status": status,
                "input": input,
                "output": output,
                "name": name,
            },
        }))

    def send_error(self, message: str) -> None:
        self.send(StreamEvent(EventKind.ERROR, {"message": message}))

    def close(self) -> None:
        """Signal the end of the stream."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(None)

    async def chunks(self) -> AsyncIterator[bytes]:
        """Async generator yielding encoded lines until the stream closes."""
        while True:
            chunk = await self._queue.get()
            if chunk is None:
                break
            yield chunk
