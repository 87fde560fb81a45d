"""Transient user notifications ("toasts").

Tracker services report every user-visible outcome here. The notifier keeps
a bounded history, logs each toast, and forwards it to listeners such as the
CLI printer.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from .config import NotifySettings, settings

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    """Toast style."""
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


ICONS = {Severity.INFO: "ℹ", Severity.SUCCESS: "✓", Severity.ERROR: "✕"}

_LOG_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.SUCCESS: logging.INFO,
    Severity.ERROR: logging.WARNING,
}


@dataclass
class Toast:
    """One notification shown to the user."""

    message: str
    severity: Severity = Severity.INFO
    duration_ms: int = 3500
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def icon(self) -> str:
        return ICONS[self.severity]

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "severity": self.severity.value,
            "duration_ms": self.duration_ms,
            "created_at": self.created_at.isoformat(),
        }


class Notifier:
    """Notification channel shared by a tracker session."""

    def __init__(self, config: NotifySettings | None = None) -> None:
        self.config = config or settings.notify
        self.history: deque[Toast] = deque(maxlen=self.config.history_size)
        self._listeners: list[Callable[[Toast], None]] = []

    def subscribe(self, listener: Callable[[Toast], None]) -> None:
        self._listeners.append(listener)

    def show(
        self,
        message: str,
        severity: Severity | str = Severity.INFO,
        duration_ms: int | None = None,
    ) -> Toast:
        """Display a toast.

        Args:
            message: Text to show.
            severity: info, success or error.
            duration_ms: Auto-dismiss delay; defaults to the configured one.
        """
        toast = Toast(
            message=message,
            severity=Severity(severity),
            duration_ms=duration_ms if duration_ms is not None else self.config.default_duration_ms,
        )
        self.history.append(toast)
        logger.log(_LOG_LEVELS[toast.severity], "[toast:%s] %s", toast.severity.value, message)
        for listener in self._listeners:
            listener(toast)
        return toast

    def info(self, message: str, duration_ms: int | None = None) -> Toast:
        return self.show(message, Severity.INFO, duration_ms)

    def success(self, message: str, duration_ms: int | None = None) -> Toast:
        return self.show(message, Severity.SUCCESS, duration_ms)

    def error(self, message: str, duration_ms: int | None = None) -> Toast:
        return self.show(message, Severity.ERROR, duration_ms)

    @property
    def last(self) -> Toast | None:
        return self.history[-1] if self.history else None
