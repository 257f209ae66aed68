from .base import SyncpointError


class DiscoveryEngineError(SyncpointError):
    """
    Raised when the discovery engine cannot be constructed or started.
    Fatal for the run.
    """
    pass


class DirectedQueryError(SyncpointError):
    """
    Raised when a single directed discovery query fails. Callers log
    it and continue.
    """

    def __init__(self, target: str, reason: str) -> None:
        super().__init__(f"Query to {target} failed: {reason}")
        self.target = target
        self.reason = reason


class AddressFeedClosedError(SyncpointError):
    """
    Delivered by the socket-update watcher when the engine's event feed
    ends before an address change was observed.
    """
    pass


class WatcherAlreadyStartedError(SyncpointError):
    pass


class WatcherAlreadyResolvedError(SyncpointError):
    pass
