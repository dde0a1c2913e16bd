"""Automation policy: what to do with a settled, large-enough change set."""

from gta.watch.session import Action, CommitDecision, Mode

_ACTIONS = {
    Mode.MANUAL: Action.NONE,
    Mode.CONFIRM: Action.AWAIT_CONFIRMATION,
    Mode.AUTO: Action.AUTO_COMMIT,
}


def decide(mode: Mode, size: int) -> CommitDecision:
    """Map the configured mode to exactly one action for this burst."""
    return CommitDecision(size_lines=size, action=_ACTIONS[Mode(mode)])


def ready_message(decision: CommitDecision, mode: Mode) -> str:
    if decision.action is Action.AWAIT_CONFIRMATION:
        return f"{decision.size_lines} lines ready - awaiting confirmation"
    if decision.action is Action.AUTO_COMMIT:
        return f"Processing {decision.size_lines} lines..."
    return f"{decision.size_lines} lines ready (mode: {Mode(mode).value})"
