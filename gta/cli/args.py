"""CLI Argument Parsing"""

import argparse
import argcomplete

from gta import __version__
from gta.config import Config
from gta.watch.loop import DEFAULT_INTERVAL

CONFIG_KEYS = list(Config.__dataclass_fields__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='gta',
        description='Git & Task Automation: watch, auto-commit and push with AI summaries',
        epilog='Example: gta watch (auto-commits settled changes)'
    )
    parser.add_argument('-v', '--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--verbose', action='store_true', help='Log to stderr as well as the log file')

    sub = parser.add_subparsers(dest='command', metavar='COMMAND')

    # watch
    watch = sub.add_parser('watch', help='Watch for changes and auto-commit/push with AI summaries')
    watch.add_argument('--once', action='store_true', help='Check once and exit')
    watch.add_argument('--interval', type=float, default=DEFAULT_INTERVAL, metavar='SECONDS',
                       help=f'Check interval in seconds (default: {DEFAULT_INTERVAL:g})')
    watch.add_argument('--force', action='store_true', help='Take over a lock held by another watcher')

    sub.add_parser('init', help='Initialize a git repository on the configured default_branch')

    # commit / push / status
    commit = sub.add_parser('commit', help='Stage everything and commit now')
    commit.add_argument('-m', '--message', type=str, metavar='TEXT', help='Commit message (skips AI)')
    commit.add_argument('--no-ai', action='store_true', help='Use the fallback message instead of AI')

    sub.add_parser('push', help='Push the current branch to origin')
    sub.add_parser('status', help='Show repository, sync and configuration status')

    # config
    config = sub.add_parser('config', help='Manage configuration')
    config_sub = config.add_subparsers(dest='config_command', metavar='ACTION')
    config_sub.add_parser('show', help='Show all configuration values')
    config_get = config_sub.add_parser('get', help='Get a configuration value')
    config_get.add_argument('key', choices=CONFIG_KEYS)
    config_set = config_sub.add_parser('set', help='Set a configuration value')
    config_set.add_argument('key', choices=CONFIG_KEYS)
    config_set.add_argument('value')
    config_set.add_argument('--local', action='store_true', help='Write ./.gtarc instead of ~/.gtarc')
    config_reset = config_sub.add_parser('reset', help='Reset configuration to defaults')
    config_reset.add_argument('--local', action='store_true', help='Remove ./.gtarc instead of ~/.gtarc')
    config_sub.add_parser('path', help='Show config file locations')

    # ai
    ai = sub.add_parser('ai', help='Run a single AI text task')
    ai.add_argument('-p', '--provider', type=str, choices=['gemini', 'openai', 'anthropic', 'ollama'],
                    help='AI provider for this call')
    ai.add_argument('-m', '--model', type=str, metavar='MODEL', help='Model name')
    ai_sub = ai.add_subparsers(dest='ai_command', metavar='TASK')
    ai_sub.add_parser('commit-message', help='Suggest a commit message for current changes')
    summarize = ai_sub.add_parser('summarize', help='Summarize recent commits')
    summarize.add_argument('-n', '--count', type=int, default=3, help='Number of commits (default: 3)')
    branch = ai_sub.add_parser('branch-name', help='Suggest a branch name for a task')
    branch.add_argument('description', nargs='+')
    readme = ai_sub.add_parser('readme', help='Generate README.md content')
    readme.add_argument('name')
    readme.add_argument('--context', type=str, default='', help='Extra context for the model')
    describe = ai_sub.add_parser('describe', help='One-sentence project description')
    describe.add_argument('name')
    describe.add_argument('files', nargs='*')

    # github
    github = sub.add_parser('github', help='GitHub CLI helpers')
    github_sub = github.add_subparsers(dest='github_command', metavar='ACTION')
    github_sub.add_parser('status', help='Check gh installation and login')
    create = github_sub.add_parser('create', help='Create a GitHub repo from this directory and push')
    create.add_argument('name')
    create.add_argument('--public', action='store_true', help='Public repository (default: private)')
    create.add_argument('--description', type=str, help='Repository description')

    sub.add_parser('completion', help='Show how to install shell tab completion')

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    argcomplete.autocomplete(parser)
    return parser.parse_args(argv)
