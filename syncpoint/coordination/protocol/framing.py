import asyncio
import struct
from typing import TypeVar

import msgspec

from syncpoint.coordination.models import Request, Response


T = TypeVar("T", Request, Response)

HEADER = struct.Struct("!I")
MAX_FRAME_SIZE = 4 * 1024 * 1024

_encoder = msgspec.msgpack.Encoder()
_request_decoder = msgspec.msgpack.Decoder(Request)
_response_decoder = msgspec.msgpack.Decoder(Response)


def encode_frame(message: Request | Response) -> bytes:
    data = _encoder.encode(message)

    if len(data) > MAX_FRAME_SIZE:
        raise ValueError(
            f"Frame of {len(data)} bytes exceeds the {MAX_FRAME_SIZE} byte limit"
        )

    return HEADER.pack(len(data)) + data


async def read_frame(reader: asyncio.StreamReader) -> bytes | None:
    """
    Read one length-prefixed frame. Returns None once the peer closed
    the connection cleanly at a frame boundary.
    """
    try:
        header = await reader.readexactly(HEADER.size)

    except asyncio.IncompleteReadError as err:
        if len(err.partial) == 0:
            return None

        raise

    (size,) = HEADER.unpack(header)
    if size > MAX_FRAME_SIZE:
        raise ValueError(
            f"Frame of {size} bytes exceeds the {MAX_FRAME_SIZE} byte limit"
        )

    return await reader.readexactly(size)


def decode_request(data: bytes) -> Request:
    return _request_decoder.decode(data)


def decode_response(data: bytes) -> Response:
    return _response_decoder.decode(data)
