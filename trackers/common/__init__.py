# Common utilities and shared modules
"""
Shared components used by every tracker:
- Configuration and logging
- Error taxonomy
- Key-value storage and the persisted keyed collection
- View projection helpers
- Async HTTP client, debouncer and toast notifier
"""

from .collection import PersistedCollection
from .config import DATA_DIR, PROJECT_ROOT, Settings, settings
from .debounce import Debouncer
from .errors import (
    DuplicateError,
    FetchError,
    NotFound,
    PersistenceError,
    TrackerError,
    ValidationError,
)
from .http_client import AsyncHTTPClient
from .logging import setup_logging
from .notify import Notifier, Severity, Toast
from .projection import project
from .storage import JsonFileStore, MemoryStore, SQLiteStore, open_store

__all__ = [
    "settings",
    "Settings",
    "PROJECT_ROOT",
    "DATA_DIR",
    "PersistedCollection",
    "Debouncer",
    "TrackerError",
    "ValidationError",
    "DuplicateError",
    "NotFound",
    "FetchError",
    "PersistenceError",
    "AsyncHTTPClient",
    "setup_logging",
    "Notifier",
    "Severity",
    "Toast",
    "project",
    "MemoryStore",
    "JsonFileStore",
    "SQLiteStore",
    "open_store",
]
