"""Watch Package - change detection and automated commits"""

from gta.watch.composer import CommitComposer, FALLBACK_MESSAGE
from gta.watch.escalation import SummaryEscalation
from gta.watch.events import CommitRequest, EventBus, LogEntry, PushRequest, WatchStatus, event_to_dict
from gta.watch.loop import WatchLoop
from gta.watch.policy import decide
from gta.watch.sampler import ChangeSampler
from gta.watch.session import (
    STABILITY_WINDOW,
    Action,
    CommitDecision,
    Mode,
    WatchSession,
    WatchSettings,
    WatchState,
)
from gta.watch.tracker import Effects, Sample, ThresholdGate, tick

__all__ = [
    "Action",
    "ChangeSampler",
    "CommitComposer",
    "CommitDecision",
    "CommitRequest",
    "Effects",
    "EventBus",
    "FALLBACK_MESSAGE",
    "LogEntry",
    "Mode",
    "PushRequest",
    "STABILITY_WINDOW",
    "Sample",
    "SummaryEscalation",
    "ThresholdGate",
    "WatchLoop",
    "WatchSession",
    "WatchSettings",
    "WatchState",
    "WatchStatus",
    "decide",
    "event_to_dict",
    "tick",
]
