from .models import Entry, LogLevel


class RunInfo(Entry, kw_only=True):
    run_id: str
    scenario: str
    instance_count: int
    level: LogLevel = LogLevel.INFO

class RunDebug(Entry, kw_only=True):
    run_id: str
    scenario: str
    instance_count: int
    level: LogLevel = LogLevel.DEBUG

class RunError(Entry, kw_only=True):
    run_id: str
    scenario: str
    instance_count: int
    level: LogLevel = LogLevel.ERROR

class RunFatal(Entry, kw_only=True):
    run_id: str
    scenario: str
    instance_count: int
    level: LogLevel = LogLevel.FATAL

class ScenarioDebug(Entry, kw_only=True):
    scenario: str
    seq: int
    state: str
    level: LogLevel = LogLevel.DEBUG

class ScenarioInfo(Entry, kw_only=True):
    scenario: str
    seq: int
    state: str
    level: LogLevel = LogLevel.INFO

class ScenarioError(Entry, kw_only=True):
    scenario: str
    seq: int
    state: str
    level: LogLevel = LogLevel.ERROR

class SequenceDebug(Entry, kw_only=True):
    state: str
    seq: int
    level: LogLevel = LogLevel.DEBUG

class BarrierDebug(Entry, kw_only=True):
    barrier: str
    target: int
    level: LogLevel = LogLevel.DEBUG

class RendezvousDebug(Entry, kw_only=True):
    topic: str
    expected: int
    received: int
    level: LogLevel = LogLevel.DEBUG

class DiscoveryDebug(Entry, kw_only=True):
    node_id: str
    level: LogLevel = LogLevel.DEBUG

class DiscoveryError(Entry, kw_only=True):
    node_id: str
    target: str
    level: LogLevel = LogLevel.ERROR

class WatcherDebug(Entry, kw_only=True):
    node_id: str
    level: LogLevel = LogLevel.DEBUG

class CoordinationServerInfo(Entry, kw_only=True):
    host: str
    port: int
    level: LogLevel = LogLevel.INFO

class CoordinationServerDebug(Entry, kw_only=True):
    host: str
    port: int
    level: LogLevel = LogLevel.DEBUG

class CoordinationServerError(Entry, kw_only=True):
    host: str
    port: int
    level: LogLevel = LogLevel.ERROR
