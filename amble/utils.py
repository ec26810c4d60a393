"""
Utility functions for amble
"""
import os

from .config import SECS_PER_DAY

DEFAULT_THREADS = 4


def default_thread_count() -> int:
    """Worker count used when the caller does not pick one"""
    return os.cpu_count() or DEFAULT_THREADS


def format_window(days: float) -> str:
    """
    Format a fractional-day window in human readable form.

    Examples: 8 days, 1.5 days, 6.0 hours, 90.0 seconds
    """
    if days >= 1:
        if float(days).is_integer():
            return f"{int(days)} day" + ("" if days == 1 else "s")
        return f"{days:g} days"
    seconds = days * SECS_PER_DAY
    if seconds >= 3600:
        return f"{seconds / 3600:.1f} hours"
    if seconds >= 60:
        return f"{seconds / 60:.1f} minutes"
    return f"{seconds:.1f} seconds"


def format_elapsed(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:.0f} ms"
    return f"{seconds:.2f} s"
