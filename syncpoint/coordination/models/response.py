from typing import Literal

import msgspec


ResponseKind = Literal[
    "ok",
    "item",
    "closed",
    "error",
]


class Response(msgspec.Struct, kw_only=True):
    request_id: int
    kind: ResponseKind
    value: int = 0
    payload: bytes | None = None
    error: str | None = None
