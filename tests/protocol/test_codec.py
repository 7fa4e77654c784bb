"""Tests for the turn stream line codec."""

import json

import pytest

from askdata.errors import ProtocolError
from askdata.protocol.codec import (
    EventKind,
    StreamDecoder,
    StreamEvent,
    decode_line,
    decode_stream,
    encode_event,
    encode_events,
)


EVENTS = [
    StreamEvent(EventKind.CONTROL, {"conversationId": "c1", "messageId": "m1"}),
    StreamEvent(EventKind.MESSAGE_START, {"id": "a1", "role": "assistant"}),
    StreamEvent(EventKind.TEXT_DELTA, {"value": "Total sales: 10 €\nnext line"}),
    StreamEvent(EventKind.TOOL_EVENT, {
        "role": "data",
        "id": "call_1",
        "data": {"status": "completed", "input": {"q": 1}, "output": {"rows": [{"m": "2024-01"}]}, "name": "run_nl_query"},
    }),
    StreamEvent(EventKind.ERROR, {"message": "boom"}),
]


async def _chunks(data: bytes, size: int):
    for start in range(0, len(data), size):
        yield data[start:start + size]


class TestEncodeEvent:
    """SUT: encode_event"""

    def test_one_line_per_event(self):
        """Each event is a single line ending with a newline."""
        encoded = encode_event(EVENTS[2])
        assert encoded.endswith(b"\n")
        assert encoded.count(b"\n") == 1

    def test_kind_prefix_and_compact_json(self):
        """The line is <kind>:<compact json>."""
        encoded = encode_event(StreamEvent(EventKind.TEXT_DELTA, {"value": "hi"}))
        assert encoded == b'text_delta:{"value":"hi"}\n'

    def test_non_ascii_escaped(self):
        encoded = encode_event(StreamEvent(EventKind.TEXT_DELTA, {"value": "€"}))
        assert encoded.isascii()
        assert decode_line(encoded.decode().rstrip("\n")).payload == {"value": "€"}

    def test_lone_surrogate_encodes(self):
        """Unpaired surrogates from agent-supplied JSON still produce a valid line."""
        event = StreamEvent(EventKind.TOOL_EVENT, {"input": json.loads('{"q": "sales \\ud83d"}')})
        encoded = encode_event(event)
        assert decode_line(encoded.decode().rstrip("\n")) == event


class TestDecodeLine:
    """SUT: decode_line"""

    def test_valid_line(self):
        event = decode_line('control:{"conversationId":"c1","messageId":"m1"}')
        assert event.kind == EventKind.CONTROL
        assert event.payload == {"conversationId": "c1", "messageId": "m1"}

    def test_payload_may_contain_colons(self):
        event = decode_line('text_delta:{"value":"a:b"}')
        assert event.payload["value"] == "a:b"

    @pytest.mark.parametrize("line", [
        "no separator",
        'unknown:{"a":1}',
        "text_delta:not json",
        "text_delta:[1, 2]",
    ])
    def test_malformed_lines_raise(self, line):
        with pytest.raises(ProtocolError):
            decode_line(line)


class TestStreamDecoder:
    """SUT: StreamDecoder.feed / close"""

    def test_partial_line_is_buffered(self):
        decoder = StreamDecoder()
        assert decoder.feed(b'text_delta:{"val') == []
        events = decoder.feed(b'ue":"x"}\n')
        assert events == [StreamEvent(EventKind.TEXT_DELTA, {"value": "x"})]

    def test_multibyte_character_split_across_reads(self):
        line = 'text_delta:{"value":"€"}\n'.encode("utf-8")
        split_at = line.index("€".encode("utf-8")) + 1
        decoder = StreamDecoder()
        assert decoder.feed(line[:split_at]) == []
        assert decoder.feed(line[split_at:])[0].payload["value"] == "€"

    def test_close_with_leftover_raises(self):
        decoder = StreamDecoder()
        decoder.feed(b'text_delta:{"value":"x"}')
        with pytest.raises(ProtocolError):
            decoder.close()

    def test_close_after_complete_lines(self):
        decoder = StreamDecoder()
        decoder.feed(encode_events(EVENTS))
        decoder.close()


class TestDecodeStream:
    """SUT: decode_stream"""

    @pytest.mark.parametrize("size", [1, 3, 7, 64, 4096])
    async def test_round_trip_with_any_chunk_size(self, size):
        """Decoding the encoded stream yields the original events whatever the read size."""
        data = encode_events(EVENTS)
        decoded = [event async for event in decode_stream(_chunks(data, size))]
        assert decoded == EVENTS

    async def test_truncated_stream_raises(self):
        data = encode_events(EVENTS[:2]) + b'text_delta:{"value":'
        decoded = []
        with pytest.raises(ProtocolError):
            async for event in decode_stream(_chunks(data, 5)):
                decoded.append(event)
        assert decoded == EVENTS[:2]

    async def test_text_newlines_do_not_split_events(self):
        data = encode_event(EVENTS[2])
        decoded = [event async for event in decode_stream(_chunks(data, 2))]
        assert len(decoded) == 1
        assert json.dumps(decoded[0].payload) == json.dumps(EVENTS[2].payload)

    async def test_closing_early_closes_source(self):
        closed = []

        async def source():
            try:
                yield encode_events(EVENTS)
                yield encode_events(EVENTS)
            finally:
                closed.append(True)

        events = decode_stream(source())
        assert await events.__anext__() == EVENTS[0]
        await events.aclose()
        assert closed == [True]
