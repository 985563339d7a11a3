"""Small text helpers shared by the Markdown renderers."""

from __future__ import annotations

import datetime as dt
import re
from typing import Final, TypeVar

T = TypeVar("T")

_EPOCH: Final[dt.datetime] = dt.datetime(1970, 1, 1, tzinfo=dt.UTC)
_SIZE_UNITS: Final[tuple[str, ...]] = ("B", "KB", "MB", "GB", "TB")
_SIZE_BASE: Final[int] = 1024
_MIN_FENCE_LENGTH: Final[int] = 3
_BACKTICK_RUN = re.compile(r"`+")


def safe(value: T | None, default: T) -> T:
    """Return ``default`` when ``value`` is None, otherwise ``value`` unchanged."""
    return default if value is None else value


def human_date(timestamp_ms: float | None) -> str:
    """Format an epoch-millisecond timestamp as an ISO 8601 UTC string.

    Args:
        timestamp_ms: Milliseconds since the Unix epoch, as reported by YouTrack

    Returns:
        Timestamp such as "2024-01-15T10:30:45.000Z".
        Returns an empty string for a missing/zero timestamp or one that cannot be converted.
    """
    if not timestamp_ms:
        return ""

    try:
        timestamp_dt = _EPOCH + dt.timedelta(milliseconds=timestamp_ms)
        formatted = timestamp_dt.isoformat(timespec="milliseconds")
        return formatted.replace("+00:00", "Z")
    except (OverflowError, TypeError, ValueError):
        return ""


def bytes_to_size(byte_count: float | None) -> str:
    """Format a byte count with base-1024 units and two decimals (e.g. "1.50 KB").

    Values of 1024 TB and above stay in TB.
    """
    if not isinstance(byte_count, int | float) or isinstance(byte_count, bool) or byte_count <= 0:
        return "0 B"

    # Equivalent to floor(log(bytes) / log(1024)) clamped to the unit table,
    # without the float error of the logarithm at exact powers of 1024
    unit_index = 0
    while byte_count >= _SIZE_BASE ** (unit_index + 1) and unit_index < len(_SIZE_UNITS) - 1:
        unit_index += 1

    scaled = byte_count / _SIZE_BASE**unit_index
    return f"{scaled:.2f} {_SIZE_UNITS[unit_index]}"


def longest_backtick_run(text: str) -> int:
    """Length of the longest run of consecutive backticks in ``text``."""
    return max((len(run) for run in _BACKTICK_RUN.findall(text)), default=0)


def wrap_in_code_block(text: str | None, language: str = "") -> str:
    """Wrap text in a fenced code block whose fence cannot collide with the content.

    The fence is one backtick longer than the longest backtick run inside the
    text, and never shorter than three.

    Args:
        text: Arbitrary text, possibly containing Markdown and backticks
        language: Info string placed right after the opening fence

    Returns:
        The fenced block, or an empty string for blank input
    """
    if not text or not text.strip():
        return ""

    content = text.strip()
    fence = "`" * max(_MIN_FENCE_LENGTH, longest_backtick_run(content) + 1)
    return f"{fence}{language}\n{content}\n{fence}"


def quote_block(text: str) -> str:
    """Prefix every line of ``text`` with a Markdown blockquote marker."""
    return "\n".join(f"> {line}" for line in text.split("\n"))
