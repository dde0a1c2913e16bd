"""
Tests for WatchLoop: commit execution, confirmation, escalation and error recovery.

Git and the AI provider are replaced by in-memory fakes.

Run with:
    pytest tests/test_loop.py -v
"""

from datetime import datetime

import pytest

from gta.cli.utils import confirm_commit_prompt
from gta.config import Config
from gta.git import CommitResult, GitError, PushResult
from gta.llm import GenerationFailed, LLMClient, LLMResponse
from gta.watch import (
    CommitComposer, EventBus, FALLBACK_MESSAGE, SummaryEscalation, WatchLoop, WatchSession, WatchState,
)
from gta.watch.escalation import fallback_summary

STEP = 1.5


class FakeRepo:
    """Working tree of `size` changed lines; commits and pushes recorded in memory."""

    def __init__(self, size=0):
        self.size = size
        self.commits = []
        self.pushed = 0
        self.sensitive = []
        self.commit_error = None
        self.sample_error = None

    def has_changes(self):
        if self.sample_error:
            raise self.sample_error
        return self.size > 0

    def change_size(self):
        return self.size

    def sensitive_files(self):
        return list(self.sensitive)

    def stage_all(self):
        pass

    def staged_diff(self):
        return "diff --git a/app.py b/app.py\n+print('hi')\n" if self.size else ""

    def working_diff(self):
        return ""

    def commit(self, message):
        if self.commit_error:
            raise self.commit_error
        if not self.size:
            return CommitResult(committed=False, message="No changes to commit")
        self.commits.append(message)
        self.size = 0
        return CommitResult(committed=True, message=message)

    def unpushed_commits_count(self):
        return len(self.commits) - self.pushed

    def unpushed_commits(self):
        return [f"abc{i:04d} {m}" for i, m in enumerate(self.commits[self.pushed:])]

    def current_branch(self):
        return "main"

    def push(self, branch):
        self.pushed = len(self.commits)
        return PushResult(success=True)


class FakeClient(LLMClient):
    def __init__(self, replies=None, error=None):
        self.replies = list(replies or [])
        self.error = error
        self.prompts = []

    def generate(self, prompt, system=None):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return LLMResponse(content=self.replies.pop(0) if self.replies else "feat(core): add watcher")

    @property
    def name(self):
        return "fake"


class FakeConfigManager:
    def __init__(self, config):
        self.config = config

    def reload(self):
        return self.config

    load = reload


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def client():
    return FakeClient()


def make_loop(repo, config, clock, client, **kwargs):
    bus = EventBus()
    factory = lambda _config: client  # noqa: E731
    loop = WatchLoop(
        repo,
        FakeConfigManager(config),
        bus=bus,
        session=WatchSession(stability_window=3.0),
        composer=CommitComposer(repo, bus, client_factory=factory, clock=lambda: datetime(2026, 1, 1, 12, 0, 0)),
        escalation=SummaryEscalation(repo, bus, client_factory=factory),
        clock=clock,
        **kwargs,
    )
    loop.session.start(clock())
    return loop


def drive(loop, clock, ticks):
    results = []
    for _ in range(ticks):
        results.append(loop.run_tick())
        clock.now += STEP
    return results


def log_messages(bus):
    return [entry.message for entry in reversed(bus.recent_logs(1000))]


# ---------------------------------------------------------------------------
# Auto mode
# ---------------------------------------------------------------------------

class TestAutoCommit:

    def test_commits_stable_change_with_ai_message(self, clock, client):
        repo = FakeRepo(size=10)
        loop = make_loop(repo, Config(commit_threshold=5), clock, client)

        drive(loop, clock, 3)

        assert repo.commits == ["12:00:00 feat(core): add watcher"]
        assert loop.session.state is WatchState.IDLE
        assert not loop.session.is_processing
        assert "Committed: 12:00:00 feat(core): add watcher" in log_messages(loop.bus)

    def test_below_threshold_does_not_commit(self, clock, client):
        repo = FakeRepo(size=10)
        loop = make_loop(repo, Config(commit_threshold=20), clock, client)

        drive(loop, clock, 3)

        assert repo.commits == []
        assert loop.session.state is WatchState.IDLE

    def test_ai_failure_uses_fallback_message(self, clock):
        repo = FakeRepo(size=10)
        loop = make_loop(repo, Config(commit_threshold=5), clock, FakeClient(error=GenerationFailed("boom")))

        drive(loop, clock, 3)

        assert repo.commits == [f"12:00:00 {FALLBACK_MESSAGE}"]
        assert "AI failed, using fallback" in log_messages(loop.bus)

    def test_ai_disabled_skips_provider(self, clock, client):
        repo = FakeRepo(size=10)
        loop = make_loop(repo, Config(commit_threshold=5, ai_commit_messages=False), clock, client)

        drive(loop, clock, 3)

        assert repo.commits == [f"12:00:00 {FALLBACK_MESSAGE}"]
        assert client.prompts == []

    def test_nothing_staged_resolves_without_commit(self, clock, client):
        repo = FakeRepo(size=10)
        loop = make_loop(repo, Config(commit_threshold=5, ai_commit_messages=False), clock, client)
        drive(loop, clock, 2)
        original_commit = repo.commit

        def empty_commit(message):
            repo.size = 0
            return original_commit(message)

        repo.commit = empty_commit
        drive(loop, clock, 1)

        assert repo.commits == []
        assert "No changes to commit" in log_messages(loop.bus)
        assert loop.session.state is WatchState.IDLE

    def test_commit_error_resets_session(self, clock, client):
        repo = FakeRepo(size=10)
        repo.commit_error = GitError("index.lock exists")
        loop = make_loop(repo, Config(commit_threshold=5), clock, client)

        drive(loop, clock, 3)

        assert "Auto-commit failed" in log_messages(loop.bus)
        assert loop.session.state is WatchState.IDLE
        assert not loop.session.is_processing


# ---------------------------------------------------------------------------
# Confirm mode
# ---------------------------------------------------------------------------

class TestConfirmMode:

    @pytest.fixture
    def config(self):
        return Config(auto_mode="confirm", commit_threshold=5)

    def test_request_stays_pending_across_ticks(self, clock, client, config):
        repo = FakeRepo(size=10)
        loop = make_loop(repo, config, clock, client)
        requests = []
        loop.bus.subscribe(lambda e: requests.append(e) if e.type == "commit_request" else None)

        drive(loop, clock, 8)

        assert len(requests) == 1
        assert requests[0].size == 10
        assert repo.commits == []
        assert loop.session.state is WatchState.PROCESSING

    def test_approve_commits(self, clock, client, config):
        repo = FakeRepo(size=10)
        loop = make_loop(repo, config, clock, client)
        drive(loop, clock, 4)

        assert loop.approve_commit() is True
        assert len(repo.commits) == 1
        assert loop.session.state is WatchState.IDLE

    def test_decline_resets_to_idle(self, clock, client, config):
        repo = FakeRepo(size=10)
        loop = make_loop(repo, config, clock, client)
        drive(loop, clock, 3)

        assert loop.decline_commit() is True
        assert repo.commits == []
        assert loop.session.state is WatchState.IDLE
        assert "Commit cancelled" in log_messages(loop.bus)

    def test_approve_without_pending_request(self, clock, client, config):
        loop = make_loop(FakeRepo(), config, clock, client)
        assert loop.approve_commit() is False
        assert loop.decline_commit() is False

    def test_synchronous_confirmer(self, clock, client, config):
        repo = FakeRepo(size=10)
        loop = make_loop(repo, config, clock, client, confirm_commit=lambda request: True)

        drive(loop, clock, 3)

        assert len(repo.commits) == 1

    def test_ctrl_c_at_prompt_escapes_loop(self, clock, client, config, monkeypatch):
        def interrupted(prompt):
            raise KeyboardInterrupt

        monkeypatch.setattr("builtins.input", interrupted)
        repo = FakeRepo(size=10)
        loop = make_loop(repo, config, clock, client, confirm_commit=confirm_commit_prompt)

        with pytest.raises(KeyboardInterrupt):
            drive(loop, clock, 3)

        assert repo.commits == []
        assert "Commit cancelled" not in log_messages(loop.bus)

    def test_end_of_input_at_prompt_declines(self, clock, client, config, monkeypatch):
        def closed(prompt):
            raise EOFError

        monkeypatch.setattr("builtins.input", closed)
        repo = FakeRepo(size=10)
        loop = make_loop(repo, config, clock, client, confirm_commit=confirm_commit_prompt)

        drive(loop, clock, 3)

        assert repo.commits == []
        assert "Commit cancelled" in log_messages(loop.bus)
        assert loop.session.state is WatchState.IDLE

    def test_sensitive_files_become_warnings(self, clock, client, config):
        repo = FakeRepo(size=10)
        repo.sensitive = [".env"]
        loop = make_loop(repo, config, clock, client)
        requests = []
        loop.bus.subscribe(lambda e: requests.append(e) if e.type == "commit_request" else None)

        drive(loop, clock, 3)

        assert requests[0].warnings == ["Sensitive file detected: .env"]


# ---------------------------------------------------------------------------
# Manual mode
# ---------------------------------------------------------------------------

class TestManualMode:

    def test_notifies_without_committing(self, clock, client):
        repo = FakeRepo(size=10)
        loop = make_loop(repo, Config(auto_mode="manual", commit_threshold=5), clock, client)

        drive(loop, clock, 3)

        assert repo.commits == []
        assert "10 lines ready (mode: manual)" in log_messages(loop.bus)
        assert loop.session.state is WatchState.IDLE


# ---------------------------------------------------------------------------
# Escalation
# ---------------------------------------------------------------------------

class TestEscalation:

    def _three_commits(self, loop, repo, clock):
        for _ in range(3):
            repo.size = 10
            drive(loop, clock, 3)

    def test_fires_once_at_threshold(self, clock):
        repo = FakeRepo()
        client = FakeClient(replies=["feat: one thing", "fix: second thing", "docs: third thing", "Three changes."])
        loop = make_loop(repo, Config(commit_threshold=5, commits_before_summary=3), clock, client)
        requests = []
        loop.bus.subscribe(lambda e: requests.append(e) if e.type == "push_request" else None)

        self._three_commits(loop, repo, clock)
        drive(loop, clock, 3)

        assert len(repo.commits) == 3
        assert len(requests) == 1
        assert requests[0].unpushed_count == 3
        assert requests[0].summary == "Three changes."
        assert loop.pending_push is requests[0]

    def test_disabled_never_fires(self, clock, client):
        repo = FakeRepo()
        config = Config(commit_threshold=5, commits_before_summary=3, auto_summary_and_push=False)
        loop = make_loop(repo, config, clock, client)

        self._three_commits(loop, repo, clock)

        assert loop.pending_push is None

    def test_approve_push(self, clock, client):
        repo = FakeRepo()
        loop = make_loop(repo, Config(commit_threshold=5, commits_before_summary=3), clock, client)
        self._three_commits(loop, repo, clock)

        assert loop.approve_push() is True
        assert repo.unpushed_commits_count() == 0
        assert loop.pending_push is None

    def test_decline_push(self, clock, client):
        repo = FakeRepo()
        loop = make_loop(repo, Config(commit_threshold=5, commits_before_summary=3), clock, client)
        self._three_commits(loop, repo, clock)

        assert loop.decline_push() is True
        assert repo.pushed == 0
        assert "Skipping push" in log_messages(loop.bus)

    def test_summary_failure_falls_back(self, clock):
        repo = FakeRepo()
        loop = make_loop(
            repo, Config(commit_threshold=5, commits_before_summary=3, ai_commit_messages=False),
            clock, FakeClient(error=GenerationFailed("down")),
        )
        self._three_commits(loop, repo, clock)

        assert loop.pending_push.summary == fallback_summary(3)


# ---------------------------------------------------------------------------
# Error recovery and one-shot checks
# ---------------------------------------------------------------------------

class TestRecovery:

    def test_tick_error_is_logged_and_resets(self, clock, client):
        repo = FakeRepo(size=10)
        loop = make_loop(repo, Config(commit_threshold=5), clock, client)
        drive(loop, clock, 1)

        def broken():
            raise RuntimeError("disk gone")

        loop.config_manager.reload = broken
        loop.run_tick()

        assert "Watch error" in log_messages(loop.bus)
        assert loop.session.state is WatchState.IDLE

    def test_sampling_failure_counts_as_clean(self, clock, client):
        repo = FakeRepo(size=10)
        repo.sample_error = GitError("git not found")
        loop = make_loop(repo, Config(commit_threshold=5), clock, client)

        drive(loop, clock, 3)

        assert repo.commits == []
        assert loop.session.state is WatchState.IDLE

    def test_check_once_commits_current_changes(self, clock, client):
        repo = FakeRepo(size=10)
        loop = make_loop(repo, Config(commit_threshold=5), clock, client)

        loop.check_once()

        assert len(repo.commits) == 1

    def test_check_once_with_clean_tree(self, clock, client):
        repo = FakeRepo()
        loop = make_loop(repo, Config(commit_threshold=5), clock, client)

        effects = loop.check_once()

        assert effects.decision is None
        assert repo.commits == []
