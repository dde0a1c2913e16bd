"""Change sampler: one read of the working tree per tick."""

from gta.git import GitError, GitRepository
from gta.logging_config import setup_logger
from gta.watch.tracker import NO_CHANGES, Sample

logger = setup_logger("gta.watch.sampler")


class ChangeSampler:
    """Reads has_changes/change_size, failing open to "no changes"."""

    def __init__(self, repo: GitRepository):
        self.repo = repo

    def sample(self) -> Sample:
        try:
            if not self.repo.has_changes():
                return NO_CHANGES
            return Sample(has_changes=True, size=self.repo.change_size())
        except GitError as e:
            logger.debug("Sampling failed, treating as no changes: %s", e)
            return NO_CHANGES
