from enum import Enum
from typing import Dict, List

import msgspec


class RunOutcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class RunResult(msgspec.Struct, kw_only=True):
    scenario: str
    seq: int | None = None
    outcome: RunOutcome = RunOutcome.FAILURE
    metrics: Dict[str, float | int | str] = msgspec.field(default_factory=dict)
    diagnostics: List[str] = msgspec.field(default_factory=list)
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome == RunOutcome.SUCCESS

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1
