"""Watch loop: drives tick() on a fixed interval and carries out its effects."""

import threading
import time
from typing import Callable, Optional

from gta.config import Config, ConfigManager
from gta.git import GitError, GitRepository
from gta.logging_config import setup_logger
from gta.watch.composer import CommitComposer
from gta.watch.escalation import SummaryEscalation
from gta.watch.events import CommitRequest, EventBus, PushRequest
from gta.watch.sampler import ChangeSampler
from gta.watch.session import Action, CommitDecision, WatchSession, WatchSettings
from gta.watch.tracker import NO_CHANGES, Effects, tick

logger = setup_logger("gta.watch.loop")

DEFAULT_INTERVAL = 1.0

# Front-end hooks: True approves, False declines, None leaves the request
# pending until approve_*()/decline_*() is called.
CommitConfirmer = Callable[[CommitRequest], Optional[bool]]
PushConfirmer = Callable[[PushRequest], Optional[bool]]


class WatchLoop:
    """Single-threaded watch loop over one repository.

    Configuration is re-read every tick, so mode and threshold changes made
    while the loop runs apply from the next sample on.
    """

    def __init__(
        self,
        repo: GitRepository,
        config_manager: ConfigManager,
        bus: Optional[EventBus] = None,
        session: Optional[WatchSession] = None,
        composer: Optional[CommitComposer] = None,
        escalation: Optional[SummaryEscalation] = None,
        confirm_commit: Optional[CommitConfirmer] = None,
        confirm_push: Optional[PushConfirmer] = None,
        interval: float = DEFAULT_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.repo = repo
        self.config_manager = config_manager
        self.bus = bus or EventBus()
        self.session = session or WatchSession()
        self.sampler = ChangeSampler(repo)
        self.composer = composer or CommitComposer(repo, self.bus)
        self.escalation = escalation or SummaryEscalation(repo, self.bus)
        self.confirm_commit = confirm_commit
        self.confirm_push = confirm_push
        self.interval = interval
        self.clock = clock
        self.pending_push: Optional[PushRequest] = None
        self._stop = threading.Event()

    # -- running ---------------------------------------------------------

    def run(self) -> None:
        """Tick until stop() is called."""
        self._stop.clear()
        self.session.start(self.clock())
        self.bus.success("Watch mode started")
        try:
            while not self._stop.is_set():
                self.run_tick()
                self._stop.wait(self.interval)
        finally:
            self.bus.info("Watch mode stopped")

    def stop(self) -> None:
        self._stop.set()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def run_tick(self) -> Effects:
        """One sample, one state transition, effects executed.

        Errors never escape: they become a log event and the session
        starts over from Idle.
        """
        try:
            config = self.config_manager.reload()
            sample = NO_CHANGES if self.session.is_processing else self.sampler.sample()
            effects = tick(self.session, self.clock(), sample, WatchSettings.from_config(config))
            for event in effects.events:
                self.bus.publish(event)
            if effects.decision is not None:
                self._execute(effects.decision, config)
            return effects
        except Exception as e:
            logger.exception("Watch tick failed")
            self.bus.error("Watch error", error=str(e))
            self.session.reset()
            return Effects()

    def check_once(self) -> Effects:
        """Single check that treats current changes as already settled."""
        self.session.start(self.clock())
        sample = self.sampler.sample()
        if sample.has_changes:
            self.session.begin_burst(self.clock() - self.session.stability_window, sample.size)
        return self.run_tick()

    # -- decisions -------------------------------------------------------

    def _execute(self, decision: CommitDecision, config: Config) -> None:
        if decision.action is Action.AUTO_COMMIT:
            self._commit(decision, config)
        elif decision.action is Action.AWAIT_CONFIRMATION:
            self._request_confirmation(decision)

    def _request_confirmation(self, decision: CommitDecision) -> None:
        warnings = [f"Sensitive file detected: {path}" for path in self.repo.sensitive_files()]
        if warnings:
            self.bus.warning(f"{len(warnings)} recommendation(s)", warnings=warnings)

        request = CommitRequest(
            size=decision.size_lines,
            warnings=warnings,
            message=f"{decision.size_lines} lines ready - awaiting confirmation",
        )
        self.bus.info(f"Awaiting confirmation for {decision.size_lines} lines...")
        self.bus.publish(request)

        if self.confirm_commit is None:
            return
        answer = self.confirm_commit(request)
        if answer is True:
            self.approve_commit()
        elif answer is False:
            self.decline_commit()

    def approve_commit(self) -> bool:
        """Commit the pending confirm-mode decision. False if none is pending."""
        decision = self.session.pending
        if decision is None or decision.action is not Action.AWAIT_CONFIRMATION:
            return False
        self._commit(decision, self.config_manager.reload())
        return True

    def decline_commit(self) -> bool:
        if self.session.pending is None:
            return False
        self.bus.info("Commit cancelled")
        self.session.resolve()
        return True

    def _commit(self, decision: CommitDecision, config: Config) -> None:
        try:
            result = self.composer.commit(config)
        except GitError as e:
            self.bus.error("Auto-commit failed", error=str(e))
            self.session.resolve()
            return

        decision.message = result.message
        if not result.committed:
            self.bus.info(result.message)
            self.session.resolve()
            return

        self.bus.success(f"Committed: {result.message}")
        self.session.resolve(now=self.clock())
        self._escalate(config)

    # -- escalation ------------------------------------------------------

    def _escalate(self, config: Config) -> None:
        try:
            request = self.escalation.check(config)
        except GitError as e:
            self.bus.error("Summary failed", error=str(e))
            return
        if request is None:
            return

        self.pending_push = request
        if self.confirm_push is None:
            return
        answer = self.confirm_push(request)
        if answer is True:
            self.approve_push()
        elif answer is False:
            self.decline_push()

    def approve_push(self) -> bool:
        request = self.pending_push
        if request is None:
            return False
        self.pending_push = None
        try:
            return self.escalation.push(request).success
        except GitError as e:
            self.bus.error("Push failed", error=str(e))
            return False

    def decline_push(self) -> bool:
        if self.pending_push is None:
            return False
        self.pending_push = None
        self.bus.info("Skipping push")
        return True
