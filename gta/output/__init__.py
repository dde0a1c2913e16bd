"""Terminal Output Formatting Package"""

import re
import sys
import os
import threading


class Colors:
    """ANSI escape codes for terminal colors."""
    RESET = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'
    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    BLUE = '\033[34m'
    MAGENTA = '\033[35m'
    CYAN = '\033[36m'


def _supports_color() -> bool:
    if os.environ.get('NO_COLOR'):
        return False
    if os.environ.get('FORCE_COLOR'):
        return True
    if not hasattr(sys.stdout, 'isatty') or not sys.stdout.isatty():
        return False
    if sys.platform == 'win32':
        try:
            import ctypes
            kernel32 = ctypes.windll.kernel32
            kernel32.SetConsoleMode(kernel32.GetStdHandle(-11), 7)
            return True
        except (AttributeError, OSError):
            return False
    return True


def _supports_unicode() -> bool:
    if sys.platform == 'win32':
        try:
            '✓'.encode(sys.stdout.encoding or 'utf-8')
            return True
        except (UnicodeEncodeError, LookupError):
            return False
    return True


COLORS_ENABLED = _supports_color()
UNICODE_ENABLED = _supports_unicode()

CHECK = '✓' if UNICODE_ENABLED else '[OK]'
CROSS = '✗' if UNICODE_ENABLED else '[X]'
BULLET = '•' if UNICODE_ENABLED else '*'
RULE = '━' if UNICODE_ENABLED else '='


def _colorize(text: str, *codes: str) -> str:
    if not COLORS_ENABLED:
        return text
    return f"{''.join(codes)}{text}{Colors.RESET}"


def success(text: str) -> str:
    return _colorize(text, Colors.GREEN)


def error(text: str) -> str:
    return _colorize(text, Colors.RED)


def warning(text: str) -> str:
    return _colorize(text, Colors.YELLOW)


def info(text: str) -> str:
    return _colorize(text, Colors.CYAN)


def dim(text: str) -> str:
    return _colorize(text, Colors.DIM)


def bold(text: str) -> str:
    return _colorize(text, Colors.BOLD)


def highlight(text: str) -> str:
    return _colorize(text, Colors.MAGENTA)


def print_success(message: str) -> None:
    print(f"{success(CHECK)} {message}")


def print_error(message: str) -> None:
    print(f"{error(CROSS)} {error(message)}", file=sys.stderr)


def print_heading(title: str) -> None:
    print(info(f"\n{RULE * 3} {title} {RULE * 3}"))


COMMIT_TYPE_COLORS = {
    'feat': Colors.GREEN,
    'fix': Colors.RED,
    'refactor': Colors.YELLOW,
    'docs': Colors.CYAN,
    'test': Colors.MAGENTA,
    'perf': Colors.GREEN,
    'chore': Colors.DIM,
    'style': Colors.DIM,
    'ci': Colors.CYAN,
    'build': Colors.CYAN,
}

# Optional HH:MM:SS stamp, then type(scope)!:
_COMMIT_PREFIX_RE = re.compile(r'^((?:\d{2}:\d{2}:\d{2} )?)(\w+)(\([^)]*\))?(!?:)')


def colorize_commit_type(message: str) -> str:
    """Color the commit type prefix on the first line of a commit message."""
    if not COLORS_ENABLED:
        return message
    lines = message.split('\n')
    match = _COMMIT_PREFIX_RE.match(lines[0])
    if match:
        color = COMMIT_TYPE_COLORS.get(match.group(2))
        if color:
            stamp = match.group(1)
            prefix = match.group(0)[len(stamp):]
            lines[0] = dim(stamp) + _colorize(prefix, Colors.BOLD, color) + lines[0][len(match.group(0)):]
    return '\n'.join(lines)


_LEVEL_STYLES = {
    'success': success,
    'error': error,
    'warning': warning,
    'git': info,
    'ai': highlight,
    'github': info,
}

_STATUS_STYLES = {
    'watching': success,
    'change_detected': warning,
    'unstable': info,
}


def format_event(event) -> str | None:
    """One display line for a watch event, None for events with no line."""
    if event.type == 'log':
        style = _LEVEL_STYLES.get(event.level, lambda text: text)
        return style(event.message)
    if event.type == 'watch_status':
        text = event.message if event.size is None else f"{event.message} ({event.size} lines)"
        return _STATUS_STYLES.get(event.status, dim)(text)
    if event.type == 'commit_request':
        return bold(event.message)
    if event.type == 'push_request':
        return bold(f"{event.unpushed_count} unpushed commits: {event.summary}")
    return None


class Spinner:
    """Animated spinner for long operations. Use as context manager."""
    FRAMES_UNICODE = ['⠋', '⠙', '⠹', '⠸', '⠼', '⠴', '⠦', '⠧', '⠇', '⠏']
    FRAMES_ASCII = ['-', '\\', '|', '/']

    def __init__(self, label: str = ""):
        self.label = label
        self._thread = None
        self._stop_event = threading.Event()
        self._frames = self.FRAMES_UNICODE if UNICODE_ENABLED else self.FRAMES_ASCII

    def _spin(self):
        idx = 0
        while not self._stop_event.is_set():
            frame = self._frames[idx % len(self._frames)]
            print(f'\r\033[K{frame} {self.label}', end='', flush=True)
            idx += 1
            self._stop_event.wait(0.08)

    def __enter__(self):
        if sys.stdout.isatty():
            self._stop_event.clear()
            self._thread = threading.Thread(target=self._spin, daemon=True)
            self._thread.start()
        return self

    def __exit__(self, *args):
        self._stop_event.set()
        if self._thread:
            self._thread.join()
        if sys.stdout.isatty():
            print('\r\033[K', end='', flush=True)


__all__ = [
    "Colors", "COLORS_ENABLED", "UNICODE_ENABLED",
    "CHECK", "CROSS", "BULLET",
    "success", "error", "warning", "info", "dim", "bold", "highlight",
    "print_success", "print_error", "print_heading",
    "colorize_commit_type", "format_event", "Spinner", "COMMIT_TYPE_COLORS",
]
