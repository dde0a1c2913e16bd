"""Stability tracking and threshold gating.

`tick()` is the whole decision engine for one sample. It mutates the
session and returns the effects to carry out, but performs no I/O itself:
the watch loop owns git, AI and prompts.
"""

from dataclasses import dataclass, field
from typing import Optional

from gta.watch.events import Event, LogEntry, WatchStatus
from gta.watch.policy import decide, ready_message
from gta.watch.session import Action, CommitDecision, WatchSession, WatchSettings, WatchState


@dataclass
class Sample:
    has_changes: bool
    size: int = 0


NO_CHANGES = Sample(has_changes=False)


@dataclass
class Effects:
    events: list[Event] = field(default_factory=list)
    decision: Optional[CommitDecision] = None

    def log(self, level: str, message: str, **data) -> None:
        self.events.append(LogEntry(level=level, message=message, data=data))

    def status(self, status: str, message: str, size: Optional[int] = None, elapsed: Optional[int] = None) -> None:
        self.events.append(WatchStatus(status=status, message=message, size=size, elapsed=elapsed))


class ThresholdGate:
    """Size filter for settled change sets. `size == threshold` passes."""

    def __init__(self, threshold_lines: int):
        self.threshold_lines = threshold_lines

    def passes(self, size: int) -> bool:
        return size >= self.threshold_lines


def tick(session: WatchSession, now: float, sample: Sample, settings: WatchSettings) -> Effects:
    """Advance the session by one sample."""
    effects = Effects()

    # A decision is in flight; nothing may start a second one
    if session.is_processing:
        return effects

    if not sample.has_changes:
        _on_clean(session, now, effects)
        return effects

    size = sample.size
    if session.state is WatchState.IDLE or size != session.last_change_size:
        session.begin_burst(now, size)
        effects.log("info", f"Change detected: {size} lines", size=size)
        effects.status("change_detected", "Waiting for stability...", size=size)
        return effects

    elapsed = session.elapsed_since_change(now)
    if elapsed < session.stability_window:
        session.state = WatchState.STABILIZING
        effects.status("unstable", f"Stabilizing... {int(elapsed)}s", size=size, elapsed=int(elapsed))
        return effects

    _on_stable(session, size, settings, effects)
    return effects


def _on_clean(session: WatchSession, now: float, effects: Effects) -> None:
    if session.state is not WatchState.IDLE:
        effects.log("info", "Changes cleared before settling")
    session.reset()

    watching_for = session.watching_for(now)
    if watching_for is not None:
        effects.status("watching", f"Watching... ({watching_for}s)", elapsed=watching_for)


def _on_stable(session: WatchSession, size: int, settings: WatchSettings, effects: Effects) -> None:
    gate = ThresholdGate(settings.threshold_lines)
    if not gate.passes(size):
        effects.log("info", f"Below threshold: {size}/{settings.threshold_lines} lines", size=size)
        session.reset()
        return

    decision = decide(settings.mode, size)
    effects.decision = decision
    level = "info" if decision.action is Action.NONE else "git"
    effects.log(level, ready_message(decision, settings.mode), size=size, mode=settings.mode.value)

    if decision.action is Action.NONE:
        session.reset()
    else:
        session.begin_processing(decision)
