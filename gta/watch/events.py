"""Watch events and the bus front-ends subscribe to."""

import itertools
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Callable, Optional

from gta.logging_config import setup_logger

logger = setup_logger("gta.watch.events")

LOG_TYPES = ("info", "success", "warning", "error", "git", "ai", "github")

_ids = itertools.count(1)


@dataclass
class WatchStatus:
    status: str  # watching | change_detected | unstable
    message: str
    size: Optional[int] = None
    elapsed: Optional[int] = None
    type: str = field(default="watch_status", init=False)


@dataclass
class CommitRequest:
    size: int
    warnings: list[str]
    message: str
    type: str = field(default="commit_request", init=False)


@dataclass
class PushRequest:
    unpushed_count: int
    summary: str
    commits: list[str]
    type: str = field(default="push_request", init=False)


@dataclass
class LogEntry:
    level: str
    message: str
    data: dict = field(default_factory=dict)
    id: int = field(default_factory=lambda: next(_ids))
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat(timespec="seconds"))
    type: str = field(default="log", init=False)


Event = WatchStatus | CommitRequest | PushRequest | LogEntry
Listener = Callable[[Event], None]


def event_to_dict(event: Event) -> dict[str, Any]:
    """JSON-ready form, e.g. for a server-sent-events stream."""
    return asdict(event)


class EventBus:
    """Fan-out of watch events to subscribed front-ends.

    Keeps the most recent log entries so a late subscriber can render
    history. A listener that raises is logged and skipped; it never stops
    delivery to the others or reaches the watch loop.
    """

    MAX_LOGS = 1000

    def __init__(self):
        self._listeners: list[Listener] = []
        self._logs: list[LogEntry] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event: Event) -> Event:
        if isinstance(event, LogEntry):
            self._logs.insert(0, event)
            del self._logs[self.MAX_LOGS:]
            logger.info("[%s] %s", event.level, event.message)

        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Event listener failed")
        return event

    def log(self, level: str, message: str, **data: Any) -> LogEntry:
        if level not in LOG_TYPES:
            raise ValueError(f"Unknown log type: {level}")
        return self.publish(LogEntry(level=level, message=message, data=data))

    def info(self, message: str, **data: Any) -> LogEntry:
        return self.log("info", message, **data)

    def success(self, message: str, **data: Any) -> LogEntry:
        return self.log("success", message, **data)

    def warning(self, message: str, **data: Any) -> LogEntry:
        return self.log("warning", message, **data)

    def error(self, message: str, **data: Any) -> LogEntry:
        return self.log("error", message, **data)

    def git(self, message: str, **data: Any) -> LogEntry:
        return self.log("git", message, **data)

    def ai(self, message: str, **data: Any) -> LogEntry:
        return self.log("ai", message, **data)

    def recent_logs(self, limit: int = 100) -> list[LogEntry]:
        return self._logs[:limit]

    def clear(self) -> None:
        self._logs = []
        self.info("Activity log cleared")
