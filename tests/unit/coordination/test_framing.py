import asyncio

import pytest

from syncpoint.coordination.models import Request, Response
from syncpoint.coordination.protocol import (
    decode_request,
    decode_response,
    encode_frame,
    read_frame,
)
from syncpoint.coordination.protocol.framing import HEADER, MAX_FRAME_SIZE


def reader_for(*chunks: bytes) -> asyncio.StreamReader:
    reader = asyncio.StreamReader()

    for chunk in chunks:
        reader.feed_data(chunk)

    reader.feed_eof()

    return reader


class TestFraming:
    """Test length-prefixed frames on a stream."""

    @pytest.mark.asyncio
    async def test_frames_are_read_in_order_until_eof(self):
        request = Request(
            request_id=1,
            run_id="run",
            kind="publish",
            name="topic",
            payload=b"\x00\x01",
        )
        response = Response(request_id=1, kind="ok", value=1)

        reader = reader_for(encode_frame(request), encode_frame(response))

        assert decode_request(await read_frame(reader)) == request
        assert decode_response(await read_frame(reader)) == response
        assert await read_frame(reader) is None

    @pytest.mark.asyncio
    async def test_truncated_frame_raises(self):
        frame = encode_frame(Response(request_id=1, kind="ok"))

        with pytest.raises(asyncio.IncompleteReadError):
            await read_frame(reader_for(frame[:-1]))

    @pytest.mark.asyncio
    async def test_oversized_frame_is_rejected(self):
        with pytest.raises(ValueError):
            await read_frame(reader_for(HEADER.pack(MAX_FRAME_SIZE + 1)))
