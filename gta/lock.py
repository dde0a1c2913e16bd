"""Advisory single-instance lock, one per lock directory and scope.

The watch command keeps its lock under the repository's git directory
(`.git/gta/`) so the lock file is never part of the working tree.
"""

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

from gta.logging_config import setup_logger

logger = setup_logger("gta.lock")

LOCK_DIRNAME = ".gta"


class LockError(Exception):
    """Raised when another live process holds the lock."""

    def __init__(self, scope: str, pid: int, info: str = ""):
        self.scope = scope
        self.pid = pid
        self.info = info
        super().__init__(f"{info or scope} is already running (PID {pid}). Use --force to take over.")


def lock_path(scope: str, lock_dir: Optional[Path] = None) -> Path:
    return (lock_dir or Path.cwd() / LOCK_DIRNAME) / f"{scope}.lock"


def _pid_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # Exists, owned by someone else
        return True
    except OSError:
        return False
    return True


def _read_owner(path: Path) -> Optional[dict]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return None
    if not isinstance(data, dict) or not isinstance(data.get("pid"), int):
        return None
    return data


def acquire_lock(scope: str, force: bool = False, lock_dir: Optional[Path] = None) -> Path:
    """Take the lock or raise LockError. Stale and corrupt locks are replaced."""
    path = lock_path(scope, lock_dir)

    if path.exists() and not force:
        owner = _read_owner(path)
        if owner and owner["pid"] != os.getpid() and _pid_alive(owner["pid"]):
            raise LockError(scope, owner["pid"], owner.get("info", ""))
        logger.info("Removing stale %s lock: %s", scope, path)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({
        "pid": os.getpid(),
        "timestamp": datetime.now().isoformat(),
        "info": f"gta {scope}",
    }, indent=2), encoding="utf-8")
    return path


def release_lock(scope: str, lock_dir: Optional[Path] = None) -> bool:
    """Remove the lock if this process owns it."""
    path = lock_path(scope, lock_dir)
    owner = _read_owner(path) if path.exists() else None
    if owner is None or owner["pid"] != os.getpid():
        return False
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    return True


class ProcessLock:
    """Context manager around acquire_lock/release_lock.

    Release happens on every exit path, including KeyboardInterrupt, so a
    Ctrl-C never leaves a lock that blocks the next run.
    """

    def __init__(self, scope: str, force: bool = False, lock_dir: Optional[Path] = None):
        self.scope = scope
        self.force = force
        self.lock_dir = lock_dir

    def __enter__(self) -> 'ProcessLock':
        acquire_lock(self.scope, force=self.force, lock_dir=self.lock_dir)
        return self

    def __exit__(self, *args) -> None:
        release_lock(self.scope, lock_dir=self.lock_dir)
