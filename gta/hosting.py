"""GitHub CLI wrapper: presence, auth and repository creation."""

import subprocess
from dataclasses import dataclass
from typing import Optional

from gta.logging_config import setup_logger

logger = setup_logger("gta.hosting")


class HostingError(Exception):
    """Raised when a gh command fails."""
    pass


@dataclass
class GitHubStatus:
    installed: bool
    authenticated: bool


class GitHubCLI:
    """Thin wrapper over `gh`."""

    def __init__(self, binary: str = "gh"):
        self.binary = binary

    def _run_gh(self, *args: str) -> subprocess.CompletedProcess:
        logger.debug("gh %s", ' '.join(args))
        try:
            return subprocess.run(
                [self.binary, *args],
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='replace',
            )
        except FileNotFoundError:
            raise HostingError("GitHub CLI (gh) is not installed. See https://cli.github.com")

    def is_installed(self) -> bool:
        try:
            return self._run_gh('--version').returncode == 0
        except HostingError:
            return False

    def is_authenticated(self) -> bool:
        try:
            result = self._run_gh('auth', 'status')
        except HostingError:
            return False
        # Older gh versions print the status to stderr
        return result.returncode == 0 and 'Logged in' in (result.stdout + result.stderr)

    def status(self) -> GitHubStatus:
        installed = self.is_installed()
        return GitHubStatus(installed=installed, authenticated=installed and self.is_authenticated())

    def create_repository(self, name: str, private: bool = True, description: Optional[str] = None) -> str:
        """Create a repo from the current directory, set origin and push. Returns gh's output."""
        args = ['repo', 'create', name, '--private' if private else '--public',
                '--source', '.', '--remote', 'origin', '--push']
        if description:
            args.extend(['--description', description])
        result = self._run_gh(*args)
        if result.returncode != 0:
            raise HostingError(f"gh repo create failed:\n{result.stderr.strip()}")
        return result.stdout.strip()


def remote_to_https(url: str) -> str:
    """git@github.com:owner/repo.git -> https://github.com/owner/repo"""
    if url.startswith('git@'):
        host, _, path = url[4:].partition(':')
        url = f"https://{host}/{path}"
    return url[:-4] if url.endswith('.git') else url
