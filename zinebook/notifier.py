from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal, Protocol

NotificationLevel = Literal["success", "error", "info", "warning"]

LEVELS: tuple[str, ...] = ("success", "error", "info", "warning")

_LOG_LEVELS = {
    "success": logging.INFO,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class Notifier(Protocol):
    def notify(self, level: NotificationLevel, title: str, message: str = "") -> None: ...


@dataclass(frozen=True)
class Notification:
    level: NotificationLevel
    title: str
    message: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"level": self.level, "title": self.title, "message": self.message}


def _check_level(level: str) -> None:
    if level not in LEVELS:
        raise ValueError(f"unknown notification level: {level!r}")


@dataclass
class LoggingNotifier:
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("zinebook.notify"))

    def notify(self, level: NotificationLevel, title: str, message: str = "") -> None:
        _check_level(level)
        text = f"{title}: {message}" if message else title
        self.logger.log(_LOG_LEVELS[level], "[%s] %s", level, text)


@dataclass
class CollectingNotifier:
    """Keeps every notification in memory, optionally forwarding to another notifier."""
    forward: Notifier | None = None
    notifications: list[Notification] = field(default_factory=list)

    def notify(self, level: NotificationLevel, title: str, message: str = "") -> None:
        _check_level(level)
        self.notifications.append(Notification(level=level, title=title, message=message))
        if self.forward is not None:
            self.forward.notify(level, title, message)

    def by_level(self, level: NotificationLevel) -> list[Notification]:
        return [n for n in self.notifications if n.level == level]

    def counts(self) -> dict[str, int]:
        return {lvl: len([n for n in self.notifications if n.level == lvl]) for lvl in LEVELS}
