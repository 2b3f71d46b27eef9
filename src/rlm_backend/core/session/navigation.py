"""
Navigation helpers for ranges and chunk positions.

Pure functions shared by the session model and the CLI. They only compute
indices; moving the session pointer is the session's job.
"""

import logging
from typing import Tuple

from ...exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)


def _parse_int(value: str, argument: str, hint: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise InvalidArgumentError(
            f"Invalid {argument}: {value!r}",
            argument=argument,
            suggestions=[hint],
        ) from e


def parse_slice_range(range_spec: str, length: int) -> Tuple[int, int]:
    """
    Parse a "start:end" character range.

    Either side may be omitted. Negative values count from the end of the
    document, and both ends are clamped to the document.

    Args:
        range_spec: Range such as "0:1000", "-500:" or ":200"
        length: Length of the document

    Returns:
        (start, end) with 0 <= start <= end <= length

    Raises:
        InvalidArgumentError: If the range is malformed or empty after clamping

    Example:
        >>> parse_slice_range("-5:", 20)
        (15, 20)
    """
    hint = "Use start:end, e.g. 0:1000, -500: or :200"
    parts = range_spec.split(":")
    if len(parts) != 2:
        raise InvalidArgumentError(f"Invalid range: {range_spec!r}", argument="range", suggestions=[hint])

    start_text, end_text = parts[0].strip(), parts[1].strip()

    start = _parse_int(start_text, "range start", hint) if start_text else 0
    end = _parse_int(end_text, "range end", hint) if end_text else length

    if start < 0:
        start += length
    if end < 0:
        end += length

    start = max(0, start)
    end = min(length, end)

    if start > end:
        raise InvalidArgumentError(
            f"Invalid range {range_spec!r}: document length is {length:,} characters",
            argument="range",
            suggestions=[hint],
        )

    return start, end


def resolve_jump_target(target: str, count: int) -> int:
    """
    Convert a jump target to a 0-based chunk index.

    Args:
        target: 1-based chunk number ("5") or percentage of the buffer ("50%")
        count: Number of chunks in the buffer

    Returns:
        Index clamped to [0, count - 1]

    Raises:
        InvalidArgumentError: If the target is not a number or percentage

    Example:
        >>> resolve_jump_target("50%", 10)
        4
    """
    text = target.strip()

    if text.endswith("%"):
        percentage = _parse_int(
            text[:-1].strip(), "percentage", "Use a number followed by %, e.g. 50%"
        )
        percentage = min(100, max(0, percentage))
        index = round(count * percentage / 100) - 1
    else:
        index = _parse_int(text, "chunk index", "Use a 1-based chunk number or a percentage, e.g. 50%") - 1

    return min(max(index, 0), max(count - 1, 0))
