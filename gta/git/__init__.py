"""Git Operations Package"""

from gta.git.repository import (
    GitRepository,
    GitError,
    FileChange,
    CommitResult,
    PushResult,
    WorkingTreeChanges,
    parse_numstat,
)

__all__ = [
    "GitRepository",
    "GitError",
    "FileChange",
    "CommitResult",
    "PushResult",
    "WorkingTreeChanges",
    "parse_numstat",
]
