"""Error taxonomy shared by every tracker.

All user-facing failures derive from TrackerError so tracker services can
catch one type and route the message to the notifier.
"""

from __future__ import annotations


class TrackerError(Exception):
    """Base class for tracker failures that end a single user action."""


class ValidationError(TrackerError):
    """Required user input is missing or malformed."""


class DuplicateError(TrackerError):
    """An entity with the same natural key is already tracked."""


class NotFound(TrackerError):
    """A lookup, barcode, detail record or entity id did not match."""


class FetchError(TrackerError):
    """A remote call failed at the network, HTTP or parse level.

    Attributes:
        operation: Name of the failed operation (e.g. "fetch_tracking").
        status: HTTP status code, or None for transport/parse failures.
        message: Underlying error message.
    """

    def __init__(self, operation: str, message: str, status: int | None = None) -> None:
        self.operation = operation
        self.status = status
        self.message = message
        detail = f"HTTP {status}: {message}" if status is not None else message
        super().__init__(f"{operation} failed: {detail}")


class PersistenceError(TrackerError):
    """Writing to the key-value store failed.

    The in-memory collection stays authoritative for the running session.
    """

    def __init__(self, key: str, message: str) -> None:
        self.key = key
        self.message = message
        super().__init__(f"Could not save '{key}': {message}")
