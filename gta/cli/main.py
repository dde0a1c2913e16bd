"""CLI Main Entry Point"""

import sys

from gta.config import ConfigManager
from gta.git import GitError, GitRepository
from gta.lock import LockError, ProcessLock
from gta.logging_config import enable_console_output, setup_logger
from gta.output import bold, dim, info, print_error
from gta.watch import EventBus, WatchLoop

from gta.cli.args import build_parser, parse_args
from gta.cli.commands import (
    run_ai, run_commit, run_config, run_github, run_init, run_install_completion, run_push, run_status,
)
from gta.cli.utils import confirm_commit_prompt, confirm_push_prompt, decline, print_event

logger = setup_logger("gta.cli")


def _confirmers(args, interactive: bool):
    """Commit/push confirm hooks for the terminal.

    Interactive terminals get y/n prompts. A one-shot run without a terminal
    declines, a long-running one leaves requests pending.
    """
    if interactive:
        return confirm_commit_prompt, confirm_push_prompt
    if args.once:
        return decline, decline
    return None, None


def run_watch(args, repo: GitRepository, manager: ConfigManager) -> int:
    """Run the watch loop with a terminal front-end."""
    try:
        repo.ensure_repo()
    except GitError as e:
        print_error(str(e))
        return 1

    config = manager.load()
    bus = EventBus()
    bus.subscribe(print_event)
    confirm_commit, confirm_push = _confirmers(args, sys.stdin.isatty())
    loop = WatchLoop(
        repo,
        manager,
        bus=bus,
        confirm_commit=confirm_commit,
        confirm_push=confirm_push,
        interval=args.interval,
    )

    try:
        with ProcessLock("watch", force=args.force, lock_dir=repo.git_dir() / "gta"):
            if args.once:
                loop.check_once()
                return 0

            print(f"\n{bold('gta watch')} {dim(str(repo.repo_path()))}")
            print(f"  {dim('Mode:')} {info(config.auto_mode)}  "
                  f"{dim('Threshold:')} {info(str(config.commit_threshold))} lines  "
                  f"{dim('Ctrl+C to stop')}\n")
            try:
                loop.run()
            except KeyboardInterrupt:
                loop.stop()
                print()
    except LockError as e:
        print_error(str(e))
        return 1
    return 0


COMMANDS = {
    'init': lambda args, repo, manager: run_init(repo, manager),
    'commit': lambda args, repo, manager: run_commit(args, repo, manager),
    'push': lambda args, repo, manager: run_push(repo),
    'status': lambda args, repo, manager: run_status(repo, manager),
    'config': lambda args, repo, manager: run_config(args, manager),
    'ai': lambda args, repo, manager: run_ai(args, repo, manager),
    'watch': run_watch,
    'github': lambda args, repo, manager: run_github(args),
    'completion': lambda args, repo, manager: run_install_completion(),
}


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if args.verbose:
        enable_console_output()

    if not args.command:
        build_parser().print_help()
        return 0

    repo = GitRepository()
    manager = ConfigManager()
    logger.debug("Running command: %s", args.command)
    try:
        return COMMANDS[args.command](args, repo, manager)
    except KeyboardInterrupt:
        print(f"\n{dim('Cancelled.')}")
        return 130


def run() -> None:
    sys.exit(main())


if __name__ == '__main__':
    run()
