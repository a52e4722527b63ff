"""Exception types raised by the content library."""


class RandpickError(Exception):
    """Base class for all randpick errors."""


class ValidationError(RandpickError):
    """Rejected input to a store operation; the collection is unchanged."""


class PersistenceError(RandpickError):
    """The storage provider failed to record the current collection.

    The in-memory mutation that triggered the write has already been
    applied when this is raised.
    """

    def __init__(self, key: str, reason: str = "") -> None:
        self.key = key
        self.reason = reason
        message = f"Failed to persist content under {key!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
