"""Line protocol for the turn stream.

Every event is a single line ``<kind>:<payload>\\n`` where the payload is a
compact, ASCII-only JSON object. The decoder buffers raw bytes, so reads may split a
line (or a multi-byte character) at any position.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, AsyncIterable, AsyncIterator, Dict, Iterable, List

from ..errors import ProtocolError


class EventKind(str, Enum):
    """Kinds of events multiplexed over one response."""

    CONTROL = "control"
    MESSAGE_START = "message_start"
    TEXT_DELTA = "text_delta"
    TOOL_EVENT = "tool_event"
    ERROR = "error"


@dataclass(frozen=True)
class StreamEvent:
    """A decoded stream event."""

    kind: EventKind
    payload: Dict[str, Any] = field(default_factory=dict)


def encode_event(event: StreamEvent) -> bytes:
    """Encode one event as a protocol line."""
    payload = json.dumps(event.payload, separators=(",", ":"), default=str)
    return f"{event.kind.value}:{payload}\n".encode("utf-8")


def encode_events(events: Iterable[StreamEvent]) -> bytes:
    """Encode a sequence of events."""
    return b"".join(encode_event(event) for event in events)


def decode_line(line: str) -> StreamEvent:
    """
    Decode a single protocol line (without the trailing newline).

    Raises:
        ProtocolError: If the line is not a valid event
    """
    kind_text, separator, payload_text = line.partition(":")
    if not separator:
        raise ProtocolError("missing separator", line)

    try:
        kind = EventKind(kind_text)
    except ValueError:
        raise ProtocolError(f"unknown kind {kind_text!r}", line)

    try:
        payload = json.loads(payload_text)
    except json.JSONDecodeError:
        raise ProtocolError("payload is not JSON", line)

    if not isinstance(payload, dict):
        raise ProtocolError("payload is not an object", line)

    return StreamEvent(kind=kind, payload=payload)


class StreamDecoder:
    """Incremental decoder that tolerates arbitrary chunk boundaries."""

    def __init__(self):
        self._buffer = b""

    def feed(self, chunk: bytes) -> List[StreamEvent]:
        """
        Add a chunk and return every event completed by it.

        Args:
            chunk: Raw bytes read from the response body

        Returns:
            Events whose line ended inside this chunk
        """
        self._buffer += chunk
        *lines, self._buffer = self._buffer.split(b"\n")

        events = []
        for raw_line in lines:
            if not raw_line:
                continue
            try:
                line = raw_line.decode("utf-8")
            except UnicodeDecodeError:
                raise ProtocolError("line is not UTF-8", repr(raw_line))
            events.append(decode_line(line))
        return events

    def close(self) -> None:
        """
        Finish decoding.

        Raises:
            ProtocolError: If the stream ended in the middle of a line
        """
        if self._buffer.strip():
            leftover = self._buffer.decode("utf-8", errors="replace")
            self._buffer = b""
            raise ProtocolError("stream ended inside a line", leftover)
        self._buffer = b""


async def decode_stream(chunks: AsyncIterable[bytes]) -> AsyncIterator[StreamEvent]:
    """
    Lazily decode an async byte stream into events.

    The source is closed when the generator finishes or is closed early.

    Args:
        chunks: Async iterable of raw body chunks

    Yields:
        Decoded events in order
    """
    decoder = StreamDecoder()
    try:
        async for chunk in chunks:
            for event in decoder.feed(chunk):
                yield event
        decoder.close()
    finally:
        aclose = getattr(chunks, "aclose", None)
        if aclose is not None:
            await aclose()
