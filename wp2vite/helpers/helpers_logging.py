"""Simple logging helpers for the wp2vite CLI."""

import contextlib
from collections.abc import Iterator


class Colors:
    """ANSI color codes for terminal output."""
    HEADER = '\033[95m'
    OKCYAN = '\033[96m'
    OKGREEN = '\033[92m'
    WARNING = '\033[93m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'


_debug_enabled = False


def set_debug(enabled: bool) -> None:
    """Enable or disable diagnostic output from print_debug."""
    global _debug_enabled  # noqa: PLW0603
    _debug_enabled = enabled


@contextlib.contextmanager
def scoped_debug(enabled: bool) -> Iterator[None]:
    """Turn diagnostic output on for the block when ``enabled``.

    The previous setting is restored on exit.
    """
    global _debug_enabled  # noqa: PLW0603
    previous = _debug_enabled
    _debug_enabled = previous or enabled
    try:
        yield
    finally:
        _debug_enabled = previous


def print_header(msg: str) -> None:
    """Print a header message."""
    print(f"{Colors.HEADER}{Colors.BOLD}{msg}{Colors.ENDC}")


def print_info(msg: str) -> None:
    """Print an info message."""
    print(f"{Colors.OKCYAN}{msg}{Colors.ENDC}")


def print_success(msg: str) -> None:
    """Print a success message."""
    print(f"{Colors.OKGREEN}✓ {msg}{Colors.ENDC}")


def print_warning(msg: str) -> None:
    """Print a warning message."""
    print(f"{Colors.WARNING}⚠️  {msg}{Colors.ENDC}")


def print_error(msg: str) -> None:
    """Print an error message."""
    print(f"{Colors.FAIL}❌ {msg}{Colors.ENDC}")


def print_debug(scope: str, msg: str) -> None:
    """Print a diagnostic message tagged with its scope (only in debug mode)."""
    if _debug_enabled:
        print(f"{Colors.DIM}[{scope}] {msg}{Colors.ENDC}")
