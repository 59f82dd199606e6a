from __future__ import annotations

"""
Number Formatting Helpers.

Human-readable sizes and signed deltas for terminal output.
"""

from typing import Optional

_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_size(num_bytes: Optional[int]) -> str:
    """Convert a byte count to a human readable string ("-" when absent)."""
    if num_bytes is None:
        return "-"
    value = float(num_bytes)
    for unit in _UNITS:
        if abs(value) < 1024.0:
            if unit == "B":
                return f"{int(value)} B"
            return f"{value:.2f} {unit}"
        value /= 1024.0
    return f"{value:.2f} PB"


def format_delta(delta: int) -> str:
    """Signed human-readable size delta; zero renders as "="."""
    if delta == 0:
        return "="
    sign = "+" if delta > 0 else "-"
    return f"{sign}{format_size(abs(delta))}"
