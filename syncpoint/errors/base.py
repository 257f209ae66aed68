class SyncpointError(Exception):
    """Base class for every error raised by syncpoint."""
    pass
