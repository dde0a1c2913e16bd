"""CLI Commands"""

import os
import sys
from dataclasses import replace

from gta.config import ConfigError, ConfigManager, coerce_value
from gta.git import GitError, GitRepository
from gta.hosting import GitHubCLI, HostingError, remote_to_https
from gta.llm import AITasks, LLMError
from gta.output import (
    bold, dim, info, success, warning, print_success, print_error, print_heading,
    Spinner, colorize_commit_type, CHECK, CROSS,
)
from gta.prompts import PromptConfig
from gta.watch import CommitComposer, EventBus, SummaryEscalation, PushRequest

from gta.cli.utils import resolve_client, print_event


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------

def _format_value(value) -> str:
    if value is None:
        return 'null'
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def display_config(manager: ConfigManager) -> int:
    """Display current configuration."""
    config = manager.load()

    print(f"\n{bold('Current Configuration')}\n")

    paths = manager.get_config_paths()
    if paths:
        for path in paths:
            print(f"  {dim('Loaded from:')} {path}")
    else:
        print(f"  {dim('Loaded from:')} defaults (no .gtarc found)")

    env_provider = os.environ.get('GTA_PROVIDER')
    env_model = os.environ.get('GTA_MODEL')
    if env_provider or env_model:
        print(f"  {dim('Environment overrides:')}")
        if env_provider:
            print(f"    GTA_PROVIDER={env_provider}")
        if env_model:
            print(f"    GTA_MODEL={env_model}")

    print()
    print(f"  {bold('Settings:')}")
    width = max(len(key) for key in config.__dataclass_fields__)
    for key in config.__dataclass_fields__:
        print(f"    {key + ':':<{width + 1}} {info(_format_value(getattr(config, key)))}")

    print(f"\n  {dim('Config locations:')}")
    print(f"    Local:  {manager.local_path}")
    print(f"    Global: {manager.global_path}\n")
    return 0


def run_config(args, manager: ConfigManager) -> int:
    action = args.config_command or 'show'
    try:
        if action == 'show':
            return display_config(manager)
        if action == 'get':
            print(_format_value(manager.get(args.key)))
            return 0
        if action == 'set':
            path = manager.set(args.key, coerce_value(args.value), global_config=not args.local)
            print_success(f"{args.key} = {_format_value(manager.get(args.key))} ({path})")
            return 0
        if action == 'reset':
            path = manager.reset(global_config=not args.local)
            print_success(f"Reset {path}")
            return 0
        if action == 'path':
            print(f"Global: {manager.global_path}")
            print(f"Local:  {manager.local_path}")
            return 0
    except ConfigError as e:
        print_error(str(e))
        return 1
    print_error(f"Unknown config action: {action}")
    return 1


# ---------------------------------------------------------------------------
# status
# ---------------------------------------------------------------------------

def run_status(repo: GitRepository, manager: ConfigManager, gh: GitHubCLI | None = None) -> int:
    """Repository, sync and configuration summary."""
    try:
        repo.ensure_repo()
        branch = repo.current_branch()
        changes = repo.working_tree_changes()
        unpushed = repo.unpushed_commits_count()
        counts = repo.ahead_behind()
        last = repo.last_commit()
        remote = repo.remote_url()
        root = repo.repo_path()
    except GitError as e:
        print_error(str(e))
        return 1

    config = manager.load()
    gh_status = (gh or GitHubCLI()).status()

    print_heading("Repository")
    print(f"  {dim('Path:')}    {root}")
    print(f"  {dim('Branch:')}  {bold(branch)}")
    print(f"  {dim('Remote:')}  {remote_to_https(remote) if remote else dim('none')}")
    if last:
        print(f"  {dim('Last:')}    {colorize_commit_type(last)}")

    print_heading("Changes")
    print(f"  {dim('Unstaged:')} {len(changes.unstaged)} files")
    print(f"  {dim('Staged:')}   {len(changes.staged)} files")
    size = changes.total_lines
    size_text = f"{size} lines"
    if config.auto_mode != 'manual':
        marker = success(size_text) if size >= config.commit_threshold else size_text
        size_text = f"{marker} {dim(f'(threshold {config.commit_threshold})')}"
    print(f"  {dim('Size:')}     {size_text}")

    print_heading("Sync")
    if counts is None:
        print(f"  {dim('No upstream')} {dim(f'({unpushed} unpushed)')}")
    else:
        ahead, behind = counts
        print(f"  {dim('Ahead:')}  {ahead}")
        print(f"  {dim('Behind:')} {behind}")

    print_heading("Setup")
    gh_mark = success(CHECK) if gh_status.authenticated else warning(CROSS)
    gh_text = ('authenticated' if gh_status.authenticated
               else 'not authenticated' if gh_status.installed else 'not installed')
    print(f"  {gh_mark} GitHub CLI {dim(gh_text)}")
    print(f"  {dim('Mode:')}     {info(config.auto_mode)}")
    print(f"  {dim('Default:')}  {info(config.default_branch)} {dim('(gta init branch)')}")
    print(f"  {dim('Provider:')} {info(config.ai_provider if config.ai_enabled else 'off')}")
    print()
    return 0


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------

def run_init(repo: GitRepository, manager: ConfigManager) -> int:
    """Create a repository whose first branch is the configured default_branch."""
    branch = manager.load().default_branch
    try:
        created = repo.init(branch)
    except GitError as e:
        print_error(str(e))
        return 1
    if not created:
        print(dim("Already a git repository."))
        return 0
    print_success(f"Initialized git repository on {bold(branch)}")
    return 0


# ---------------------------------------------------------------------------
# commit / push
# ---------------------------------------------------------------------------

def run_commit(args, repo: GitRepository, manager: ConfigManager) -> int:
    """Stage everything and commit with a composed or given message."""
    config = manager.load()
    if args.no_ai:
        config = replace(config, ai_commit_messages=False)

    bus = EventBus()
    bus.subscribe(print_event)
    composer = CommitComposer(repo, bus, client_factory=lambda c: resolve_client(None, None, c))
    try:
        repo.ensure_repo()
        if not repo.changed_files():
            print(dim("Nothing to commit."))
            return 0
        result = composer.commit(config, message=args.message)
    except GitError as e:
        print_error(str(e))
        return 1

    if not result.committed:
        print(dim(result.message))
        return 0
    print_success(f"Committed: {colorize_commit_type(result.message)}")
    return 0


def run_push(repo: GitRepository) -> int:
    bus = EventBus()
    bus.subscribe(print_event)
    try:
        repo.ensure_repo()
        count = repo.unpushed_commits_count()
        request = PushRequest(unpushed_count=count, summary="", commits=repo.unpushed_commits())
        result = SummaryEscalation(repo, bus).push(request)
    except GitError as e:
        print_error(str(e))
        return 1
    return 0 if result.success else 1


# ---------------------------------------------------------------------------
# ai
# ---------------------------------------------------------------------------

def run_ai(args, repo: GitRepository, manager: ConfigManager) -> int:
    """Standalone AI text operations."""
    config = manager.load()
    action = args.ai_command
    if action is None:
        print_error("Choose a task: commit-message, summarize, branch-name, readme, describe")
        return 1

    try:
        tasks = AITasks(resolve_client(args.provider, args.model, config))
        with Spinner(f"Asking {tasks.client.name}..."):
            if action == 'commit-message':
                repo.ensure_repo()
                diff = repo.staged_diff() or repo.working_diff()
                output = tasks.commit_message(diff, PromptConfig(custom_prompt=config.ai_commit_prompt))
            elif action == 'summarize':
                repo.ensure_repo()
                output = tasks.summarize_commits(repo.recent_commits(args.count))
            elif action == 'branch-name':
                output = tasks.branch_name(' '.join(args.description), config.ai_branch_prompt)
            elif action == 'readme':
                output = tasks.readme(args.name, args.context)
            else:
                output = tasks.project_description(args.name, args.files)
    except (LLMError, GitError) as e:
        print_error(str(e))
        return 1

    print(colorize_commit_type(output) if action == 'commit-message' else output)
    return 0


# ---------------------------------------------------------------------------
# github
# ---------------------------------------------------------------------------

def run_github(args, gh: GitHubCLI | None = None) -> int:
    """gh login check and repository creation."""
    gh = gh or GitHubCLI()
    status = gh.status()
    if not status.installed:
        print_error("GitHub CLI (gh) is not installed. See https://cli.github.com")
        return 1
    if not status.authenticated:
        print_error("GitHub CLI is not logged in. Run: gh auth login")
        return 1

    if args.github_command != 'create':
        print_success("GitHub CLI is installed and logged in")
        return 0

    try:
        with Spinner(f"Creating {args.name}..."):
            output = gh.create_repository(args.name, private=not args.public, description=args.description)
    except HostingError as e:
        print_error(str(e))
        return 1
    print_success(f"Created {args.name}")
    if output:
        print(dim(output))
    return 0


# ---------------------------------------------------------------------------
# completion
# ---------------------------------------------------------------------------

def run_install_completion() -> int:
    """Show how to install shell tab completion."""
    shell = os.environ.get('SHELL', '')
    line = 'eval "$(register-python-argcomplete gta)"'

    print(f"\n{bold('Tab Completion Setup')}\n")

    if 'zsh' in shell or 'bash' in shell:
        rc_file = os.path.expanduser('~/.zshrc' if 'zsh' in shell else '~/.bashrc')
        print(f"Add this line to {dim(rc_file)}:\n")
        print(f"  {line}\n")
        print(f"Then run: {dim('source ' + rc_file)}")
    elif sys.platform == 'win32':
        print("For PowerShell, add to your $PROFILE:\n")
        print("  register-python-argcomplete --shell powershell gta | Out-String | Invoke-Expression")
    else:
        print(f"  {dim('# Bash/Zsh')}")
        print(f"  {line}\n")
        print(f"  {dim('# Fish')}")
        print("  register-python-argcomplete --shell fish gta | source")

    print(f"\n{dim('After setup, press TAB to autocomplete commands and config keys.')}")
    return 0
