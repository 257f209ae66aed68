from .base import SyncpointError


class ScenarioStateError(SyncpointError):
    def __init__(self, current: str, requested: str) -> None:
        super().__init__(
            f"Cannot transition from {current} to {requested}"
        )
        self.current = current
        self.requested = requested


class UnknownScenarioError(SyncpointError):
    def __init__(self, name: str, supported: list[str]) -> None:
        super().__init__(
            f"Unknown scenario {name} - supported scenarios are: {', '.join(supported)}"
        )
        self.name = name
        self.supported = supported
