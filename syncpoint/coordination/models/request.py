from typing import Literal

import msgspec


RequestKind = Literal[
    "signal_entry",
    "barrier",
    "publish",
    "subscribe",
    "unsubscribe",
]


class Request(msgspec.Struct, kw_only=True):
    request_id: int
    run_id: str
    kind: RequestKind
    name: str
    target: int = 0
    payload: bytes | None = None
