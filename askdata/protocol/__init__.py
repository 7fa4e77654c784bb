"""Turn stream line protocol."""

from .codec import (
    EventKind,
    StreamEvent,
    StreamDecoder,
    encode_event,
    encode_events,
    decode_line,
    decode_stream,
)
from .stream import TurnStream

__all__ = [
    "EventKind",
    "StreamEvent",
    "StreamDecoder",
    "encode_event",
    "encode_events",
    "decode_line",
    "decode_stream",
    "TurnStream",
]
