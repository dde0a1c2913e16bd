"""CLI Utility Functions"""

import os

from gta.llm import LLMClient, get_client
from gta.output import dim, format_event
from gta.watch.events import CommitRequest, PushRequest


def resolve_client(provider: str | None, model: str | None, config) -> LLMClient:
    """Resolve provider and model from args, env, or config.

    Precedence: CLI args > environment variables > config file
    """
    provider = provider or os.environ.get('GTA_PROVIDER') or config.ai_provider
    model = model or os.environ.get('GTA_MODEL') or config.ai_model
    return get_client(provider=provider, model=model)


def ask_yes_no(question: str, default: bool = True) -> bool | None:
    """Prompt on the terminal. None on end of input (Ctrl-D).

    Ctrl-C is not caught: it has to reach the watch command so the loop stops.
    """
    suffix = "[Y/n]" if default else "[y/N]"
    try:
        answer = input(f"{question} {suffix}: ").strip().lower()
    except EOFError:
        print()
        return None
    if not answer:
        return default
    return answer in ('y', 'yes')


def print_event(event) -> None:
    line = format_event(event)
    if line:
        print(line, flush=True)


def confirm_commit_prompt(request: CommitRequest) -> bool:
    print()
    for warning in request.warnings:
        print(dim(f"  {warning}"))
    return ask_yes_no(f"Commit these changes ({request.size} lines)?") is True


def confirm_push_prompt(request: PushRequest) -> bool:
    print()
    for commit in request.commits:
        print(dim(f"  {commit}"))
    print(f"\n  Summary: {request.summary}\n")
    return ask_yes_no(f"Push {request.unpushed_count} commits to remote?") is True


def decline(_request) -> bool:
    """Confirmer for non-interactive one-shot runs: never approve."""
    return False
