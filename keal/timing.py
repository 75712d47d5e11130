"""Start-up timing messages."""

from __future__ import annotations

import sys
import time

from keal.arguments import arguments

_start: int | None = None


def start_log_time() -> None:
    """Remember the moment timing started; later calls change nothing."""
    global _start
    if _start is None:
        _start = time.monotonic_ns()


def log_time(message: object) -> None:
    """Print the time elapsed since start, when --timings was given."""
    try:
        current = arguments()
    except RuntimeError:
        return
    if not current.timings:
        return

    start_log_time()
    assert _start is not None
    seconds, remainder = divmod(time.monotonic_ns() - _start, 1_000_000_000)
    millis = remainder // 1_000_000
    print(f"[{seconds}.{millis:03}]: {message}", file=sys.stderr)