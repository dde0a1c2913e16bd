"""
Tests for the single-instance lock and its use by `gta watch`.

Run with:
    pytest tests/test_lock.py -v
"""

import argparse
import importlib
import json
import os

import pytest

from gta.config import Config
from gta.lock import LockError, ProcessLock, acquire_lock, lock_path, release_lock

# gta.cli re-exports the main() function under the submodule's name
cli_main = importlib.import_module("gta.cli.main")


@pytest.fixture
def lock_dir(tmp_path):
    return tmp_path / "gta"


def write_owner(lock_dir, payload):
    path = lock_path("watch", lock_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(payload)
    return path


# ---------------------------------------------------------------------------
# acquire / release
# ---------------------------------------------------------------------------

class TestLock:

    def test_acquire_writes_pid(self, lock_dir):
        path = acquire_lock("watch", lock_dir=lock_dir)

        assert path == lock_dir / "watch.lock"
        assert json.loads(path.read_text())["pid"] == os.getpid()

    def test_default_dir_is_dot_gta(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert lock_path("watch") == tmp_path / ".gta" / "watch.lock"

    def test_release_removes_own_lock(self, lock_dir):
        acquire_lock("watch", lock_dir=lock_dir)
        assert release_lock("watch", lock_dir=lock_dir) is True
        assert not lock_path("watch", lock_dir).exists()

    def test_release_without_lock(self, lock_dir):
        assert release_lock("watch", lock_dir=lock_dir) is False

    def test_live_owner_blocks(self, lock_dir, monkeypatch):
        write_owner(lock_dir, json.dumps({"pid": os.getpid() + 1, "info": "gta watch"}))
        monkeypatch.setattr("gta.lock._pid_alive", lambda pid: True)

        with pytest.raises(LockError, match="--force"):
            acquire_lock("watch", lock_dir=lock_dir)

    def test_force_takes_over(self, lock_dir, monkeypatch):
        path = write_owner(lock_dir, json.dumps({"pid": os.getpid() + 1}))
        monkeypatch.setattr("gta.lock._pid_alive", lambda pid: True)

        acquire_lock("watch", force=True, lock_dir=lock_dir)
        assert json.loads(path.read_text())["pid"] == os.getpid()

    def test_stale_lock_replaced(self, lock_dir, monkeypatch):
        path = write_owner(lock_dir, json.dumps({"pid": os.getpid() + 1}))
        monkeypatch.setattr("gta.lock._pid_alive", lambda pid: False)

        acquire_lock("watch", lock_dir=lock_dir)
        assert json.loads(path.read_text())["pid"] == os.getpid()

    def test_corrupt_lock_replaced(self, lock_dir):
        path = write_owner(lock_dir, "garbage")

        acquire_lock("watch", lock_dir=lock_dir)
        assert json.loads(path.read_text())["pid"] == os.getpid()

    def test_foreign_lock_not_released(self, lock_dir):
        path = write_owner(lock_dir, json.dumps({"pid": os.getpid() + 1}))

        assert release_lock("watch", lock_dir=lock_dir) is False
        assert path.exists()

    def test_context_manager_releases_on_error(self, lock_dir):
        with pytest.raises(KeyboardInterrupt):
            with ProcessLock("watch", lock_dir=lock_dir):
                assert lock_path("watch", lock_dir).exists()
                raise KeyboardInterrupt
        assert not lock_path("watch", lock_dir).exists()


# ---------------------------------------------------------------------------
# gta watch
# ---------------------------------------------------------------------------

class FakeRepo:
    def __init__(self, root):
        self.root = root

    def ensure_repo(self):
        pass

    def repo_path(self):
        return self.root

    def git_dir(self):
        return self.root / ".git"


class FakeConfigManager:
    def load(self):
        return Config()

    reload = load


class InterruptedLoop:
    """Stands in for WatchLoop; Ctrl-C arrives while it runs."""

    def __init__(self, repo, manager, **kwargs):
        self.lock = lock_path("watch", repo.git_dir() / "gta")
        self.held_lock = None
        self.stopped = False
        InterruptedLoop.last = self

    def _interrupt(self):
        self.held_lock = self.lock.exists()
        raise KeyboardInterrupt

    def run(self):
        self._interrupt()

    def check_once(self):
        self._interrupt()

    def stop(self):
        self.stopped = True


@pytest.fixture
def watch(tmp_path, monkeypatch):
    monkeypatch.setattr(cli_main, "WatchLoop", InterruptedLoop)
    repo = FakeRepo(tmp_path)

    def _run(once=False, force=False):
        args = argparse.Namespace(once=once, force=force, interval=1.0)
        return cli_main.run_watch(args, repo, FakeConfigManager())
    return _run


class TestWatchCommandLock:

    def test_interrupt_stops_loop_and_releases_lock(self, watch, tmp_path):
        assert watch() == 0

        loop = InterruptedLoop.last
        assert loop.held_lock is True
        assert loop.stopped is True
        assert not loop.lock.exists()

    def test_lock_lives_in_git_dir(self, watch, tmp_path):
        watch()
        assert InterruptedLoop.last.lock == tmp_path / ".git" / "gta" / "watch.lock"
        assert not (tmp_path / ".gta").exists()

    def test_interrupt_during_once_releases_lock(self, watch):
        with pytest.raises(KeyboardInterrupt):
            watch(once=True)

        loop = InterruptedLoop.last
        assert loop.held_lock is True
        assert not loop.lock.exists()

    def test_held_lock_fails(self, watch, tmp_path, monkeypatch, capsys):
        write_owner(tmp_path / ".git" / "gta", json.dumps({"pid": os.getpid() + 1, "info": "gta watch"}))
        monkeypatch.setattr("gta.lock._pid_alive", lambda pid: True)

        assert watch() == 1
        assert "already running" in capsys.readouterr().err
