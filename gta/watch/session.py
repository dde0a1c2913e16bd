"""Watch session state: the burst being tracked and the decision in flight."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

# Quiet period a change set must keep the same size before it counts as settled
STABILITY_WINDOW = 3.0


class Mode(str, Enum):
    MANUAL = "manual"
    CONFIRM = "confirm"
    AUTO = "auto"


class WatchState(str, Enum):
    IDLE = "idle"
    DETECTING = "detecting"
    STABILIZING = "stabilizing"
    PROCESSING = "processing"


class Action(str, Enum):
    NONE = "none"
    AWAIT_CONFIRMATION = "await_confirmation"
    AUTO_COMMIT = "auto_commit"


@dataclass
class CommitDecision:
    """Produced once per stable, above-threshold burst."""
    size_lines: int
    action: Action
    message: Optional[str] = None


@dataclass
class WatchSettings:
    """Per-tick snapshot of the configuration values the core reads."""
    mode: Mode = Mode.AUTO
    threshold_lines: int = 20

    @classmethod
    def from_config(cls, config) -> 'WatchSettings':
        return cls(mode=Mode(config.auto_mode), threshold_lines=config.commit_threshold)


@dataclass
class WatchSession:
    """State of one watch loop. Owned by whoever runs the loop."""
    stability_window: float = STABILITY_WINDOW
    state: WatchState = WatchState.IDLE
    last_change_at: Optional[float] = None
    last_change_size: int = 0
    is_processing: bool = False
    started_at: Optional[float] = None
    pending: Optional[CommitDecision] = field(default=None, repr=False)

    def start(self, now: float) -> None:
        self.reset()
        self.started_at = now

    def reset(self) -> None:
        """Back to Idle with no burst tracked and nothing in flight."""
        self.state = WatchState.IDLE
        self.last_change_at = None
        self.last_change_size = 0
        self.is_processing = False
        self.pending = None

    def begin_burst(self, now: float, size: int) -> None:
        self.state = WatchState.DETECTING
        self.last_change_at = now
        self.last_change_size = size

    def begin_processing(self, decision: CommitDecision) -> None:
        self.state = WatchState.PROCESSING
        self.last_change_at = None
        self.is_processing = True
        self.pending = decision

    def resolve(self, now: Optional[float] = None) -> None:
        """Terminal resolution of a decision: committed, declined or errored.

        A commit restarts the "watching" clock shown to the operator.
        """
        self.reset()
        if now is not None:
            self.started_at = now

    def elapsed_since_change(self, now: float) -> float:
        if self.last_change_at is None:
            return 0.0
        return now - self.last_change_at

    def watching_for(self, now: float) -> Optional[int]:
        if self.started_at is None:
            return None
        return int(now - self.started_at)
