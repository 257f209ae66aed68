from typing import Literal

import msgspec


RunEventKind = Literal[
    "message",
    "success",
    "failure",
]


class RunEvent(msgspec.Struct, frozen=True, kw_only=True):
    run_id: str
    seq: int | None
    kind: RunEventKind
    message: str | None = None
