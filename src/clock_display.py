from __future__ import annotations


def format_clock(seconds: int) -> str:
    """Format seconds as `MM:SS`; minutes keep counting past 59."""
    minutes, remainder = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{remainder:02d}"
