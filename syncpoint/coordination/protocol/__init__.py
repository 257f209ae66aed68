from .framing import (
    decode_request as decode_request,
    decode_response as decode_response,
    encode_frame as encode_frame,
    read_frame as read_frame,
    MAX_FRAME_SIZE as MAX_FRAME_SIZE,
)
