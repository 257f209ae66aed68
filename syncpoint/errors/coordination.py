"""
Coordination exceptions for sequence allocation, rendezvous and barriers.

All of these are fatal for a run: a process that cannot reach the
coordination service, or whose rendezvous/barrier can no longer reach its
expected count, aborts and reports a failed run.
"""

from .base import SyncpointError


class CoordinationError(SyncpointError):
    """
    Raised when the coordination service is unreachable or answers
    with a protocol error.
    """
    pass


class RendezvousError(SyncpointError):
    pass


class RendezvousClosedError(RendezvousError):
    """
    Raised when the topic feed closes before the expected number of
    records arrived. Indicates a crashed participant or a miscounted
    run and is never retried.
    """

    def __init__(self, topic: str, expected: int, received: int) -> None:
        super().__init__(
            f"Topic {topic} closed after {received} of {expected} records"
        )
        self.topic = topic
        self.expected = expected
        self.received = received


class RendezvousTimeoutError(RendezvousError):
    """Raised when an opt-in rendezvous timeout expires."""

    def __init__(self, topic: str, expected: int, received: int, timeout: float) -> None:
        super().__init__(
            f"Topic {topic} received {received} of {expected} records within {timeout}s"
        )
        self.topic = topic
        self.expected = expected
        self.received = received
        self.timeout = timeout


class BarrierError(SyncpointError):
    pass


class BarrierTimeoutError(BarrierError):
    """Raised when an opt-in barrier timeout expires."""

    def __init__(self, state: str, target: int, timeout: float) -> None:
        super().__init__(
            f"Barrier {state} did not reach {target} entries within {timeout}s"
        )
        self.state = state
        self.target = target
        self.timeout = timeout


class BarrierReuseError(BarrierError):
    """
    Raised when a process announces a barrier name it already passed.
    Re-announcing a satisfied barrier has no defined meaning.
    """

    def __init__(self, state: str) -> None:
        super().__init__(f"Barrier {state} was already signalled by this instance")
        self.state = state
