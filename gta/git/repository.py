"""Git Repository - the version control operations the watch loop relies on."""

import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from gta.logging_config import setup_logger

logger = setup_logger("gta.git")

# Substrings that mark a path as likely to hold secrets
SENSITIVE_PATTERNS = ['.env', 'credentials', 'secrets', 'password', 'private', '.pem', '.key']


@dataclass
class FileChange:
    """Represents a single file's changes."""
    path: str
    additions: int
    deletions: int

    @property
    def total_changes(self) -> int:
        return self.additions + self.deletions


@dataclass
class CommitResult:
    committed: bool
    message: str


@dataclass
class PushResult:
    success: bool
    error: str = ""


@dataclass
class WorkingTreeChanges:
    """Unstaged and staged numstat entries for the working tree."""
    unstaged: list[FileChange] = field(default_factory=list)
    staged: list[FileChange] = field(default_factory=list)

    @property
    def total_lines(self) -> int:
        return sum(f.total_changes for f in self.unstaged + self.staged)


class GitError(Exception):
    """Raised when git operations fail."""
    pass


def parse_numstat(output: str) -> list[FileChange]:
    """Parse 'git diff --numstat' output. Binary files ('-') count as 0."""
    files = []
    for line in output.strip().split('\n'):
        parts = line.split('\t')
        if len(parts) >= 3:
            additions = int(parts[0]) if parts[0].isdigit() else 0
            deletions = int(parts[1]) if parts[1].isdigit() else 0
            files.append(FileChange(path=parts[2], additions=additions, deletions=deletions))
    return files


class GitRepository:
    """Runs git in one working directory.

    Read operations used by the watch loop fail open (no changes, zero
    unpushed commits) so a flaky git call never stops the loop.
    """

    def __init__(self, cwd: Optional[Path] = None):
        self.cwd = cwd

    def _run_git(self, *args: str) -> str:
        """Run a git command and return stdout."""
        logger.debug("git %s", ' '.join(args))
        try:
            result = subprocess.run(
                ['git', *args],
                cwd=self.cwd,
                capture_output=True,
                text=True,
                check=True,
                encoding='utf-8',
                errors='replace'
            )
            return result.stdout
        except subprocess.CalledProcessError as e:
            raise GitError(f"Git command failed: git {' '.join(args)}\n{e.stderr.strip()}")
        except FileNotFoundError:
            raise GitError("Git is not installed or not in PATH")

    def _succeeds(self, *args: str) -> bool:
        try:
            self._run_git(*args)
            return True
        except GitError:
            return False

    def is_repo(self) -> bool:
        return self._succeeds('rev-parse', '--is-inside-work-tree')

    def ensure_repo(self) -> None:
        """Fail fast if git is missing or we're not inside a repository."""
        self._run_git('--version')
        if not self.is_repo():
            raise GitError('Not inside a git repository. Run "git init" first.')

    def has_changes(self) -> bool:
        """True when tracked files differ from the index or HEAD."""
        try:
            unstaged = self._run_git('diff', '--name-only')
            staged = self._run_git('diff', '--cached', '--name-only')
        except GitError as e:
            logger.debug("has_changes failed, assuming clean: %s", e)
            return False
        return bool(unstaged.strip() or staged.strip())

    def working_tree_changes(self) -> WorkingTreeChanges:
        return WorkingTreeChanges(
            unstaged=parse_numstat(self._run_git('diff', '--numstat')),
            staged=parse_numstat(self._run_git('diff', '--cached', '--numstat')),
        )

    def change_size(self) -> int:
        """Added + deleted lines across unstaged and staged changes."""
        return self.working_tree_changes().total_lines

    def changed_files(self) -> list[str]:
        """Paths reported by 'git status --porcelain', untracked included."""
        output = self._run_git('status', '--porcelain')
        paths = []
        for line in output.splitlines():
            path = line[3:].strip()
            if ' -> ' in path:
                path = path.split(' -> ', 1)[1]
            if path:
                paths.append(path.strip('"'))
        return paths

    def sensitive_files(self) -> list[str]:
        try:
            files = self.changed_files()
        except GitError:
            return []
        return [f for f in files if any(p in f.lower() for p in SENSITIVE_PATTERNS)]

    def staged_diff(self) -> str:
        return self._run_git('diff', '--cached')

    def working_diff(self) -> str:
        return self._run_git('diff')

    def stage_all(self) -> None:
        self._run_git('add', '-A')

    def commit(self, message: str) -> CommitResult:
        """Stage everything, then commit only if something ended up staged."""
        self.stage_all()
        if self._succeeds('diff', '--cached', '--quiet'):
            return CommitResult(committed=False, message="No changes to commit")
        self._run_git('commit', '-m', message)
        logger.info("Committed: %s", message)
        return CommitResult(committed=True, message=message)

    def push(self, branch: str) -> PushResult:
        """Push with -u so a missing upstream gets created."""
        try:
            self._run_git('push', '-u', 'origin', branch)
        except GitError as e:
            logger.warning("Push of %s failed: %s", branch, e)
            return PushResult(success=False, error=str(e))
        return PushResult(success=True)

    def current_branch(self) -> str:
        return self._run_git('rev-parse', '--abbrev-ref', 'HEAD').strip()

    def has_upstream(self) -> bool:
        return self._succeeds('rev-parse', '--abbrev-ref', '@{u}')

    def unpushed_commits_count(self) -> int:
        """Commits on HEAD missing from the tracking ref; 0 without upstream."""
        if not self.has_upstream():
            return 0
        try:
            return int(self._run_git('rev-list', '--count', '@{u}..HEAD').strip() or 0)
        except (GitError, ValueError):
            return 0

    def unpushed_commits(self) -> list[str]:
        if not self.has_upstream():
            return []
        try:
            output = self._run_git('log', '--oneline', '@{u}..HEAD')
        except GitError:
            return []
        return [line for line in output.strip().split('\n') if line]

    def ahead_behind(self) -> Optional[tuple[int, int]]:
        if not self.has_upstream():
            return None
        ahead = int(self._run_git('rev-list', '--count', '@{u}..HEAD').strip() or 0)
        behind = int(self._run_git('rev-list', '--count', 'HEAD..@{u}').strip() or 0)
        return ahead, behind

    def recent_commits(self, count: int) -> list[str]:
        output = self._run_git('log', f'-{count}', '--format=%h %s')
        return [line for line in output.strip().split('\n') if line]

    def last_commit(self) -> Optional[str]:
        try:
            return self._run_git('log', '-1', '--format=%h - %s').strip() or None
        except GitError:
            return None

    def remote_url(self) -> Optional[str]:
        try:
            return self._run_git('remote', 'get-url', 'origin').strip() or None
        except GitError:
            return None

    def repo_path(self) -> Path:
        return Path(self._run_git('rev-parse', '--show-toplevel').strip())

    def git_dir(self) -> Path:
        """Absolute path of the .git directory (outside the working tree)."""
        return Path(self._run_git('rev-parse', '--absolute-git-dir').strip())

    def init(self, default_branch: str) -> bool:
        """git init with HEAD on `default_branch`. False if already a repository."""
        self._run_git('--version')
        if self.is_repo():
            return False
        self._run_git('init')
        self._run_git('symbolic-ref', 'HEAD', f'refs/heads/{default_branch}')
        logger.info("Initialized repository on %s", default_branch)
        return True
