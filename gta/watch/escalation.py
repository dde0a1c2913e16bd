"""Summary escalation: once enough commits pile up, summarize and ask to push."""

from typing import Optional

from gta.config import Config
from gta.git import GitRepository, PushResult
from gta.llm import AITasks, LLMError
from gta.logging_config import setup_logger
from gta.watch.composer import ClientFactory, client_from_config
from gta.watch.events import EventBus, PushRequest

logger = setup_logger("gta.watch.escalation")


def fallback_summary(count: int) -> str:
    return f"{count} commits ready to push"


class SummaryEscalation:
    """Watches the unpushed-commit count after each commit."""

    def __init__(self, repo: GitRepository, bus: EventBus, client_factory: ClientFactory = client_from_config):
        self.repo = repo
        self.bus = bus
        self.client_factory = client_factory

    def should_escalate(self, config: Config, unpushed_count: int) -> bool:
        return config.auto_summary_and_push and unpushed_count >= config.commits_before_summary

    def check(self, config: Config) -> Optional[PushRequest]:
        """Emit and return a PushRequest when the threshold is reached."""
        count = self.repo.unpushed_commits_count()
        if not self.should_escalate(config, count):
            return None

        self.bus.info(f"{count} commits - creating summary...", unpushed_count=count)
        commits = self.repo.unpushed_commits()
        summary = self.summarize(config, commits, count)

        request = PushRequest(unpushed_count=count, summary=summary, commits=commits)
        self.bus.publish(request)
        return request

    def summarize(self, config: Config, commits: list[str], count: int) -> str:
        if config.ai_provider == "none":
            return fallback_summary(count)
        try:
            summary = AITasks(self.client_factory(config)).summarize_commits(commits)
        except LLMError as e:
            logger.warning("Commit summary failed: %s", e)
            self.bus.warning("AI summary failed, using commit list", error=str(e))
            return fallback_summary(count)
        self.bus.ai("Summary ready")
        return summary

    def push(self, request: PushRequest) -> PushResult:
        """Push the current branch, creating its upstream if needed."""
        branch = self.repo.current_branch()
        self.bus.git(f"Pushing {request.unpushed_count} commits to {branch}...")
        result = self.repo.push(branch)
        if result.success:
            self.bus.success(f"Pushed {request.unpushed_count} commits", branch=branch)
        else:
            self.bus.error("Push failed", error=result.error)
        return result
