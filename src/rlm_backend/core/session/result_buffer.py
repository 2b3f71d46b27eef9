"""
Result Buffer Module

Key/value accumulator for per-chunk results and the aggregation boundary
that combines them into one string.

Components:
- ResultBuffer: Mutable view over a session's results map
- AggregateOutput: Combined results with a FINAL or PARTIAL signal
- aggregate_results: Build an AggregateOutput from a session
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Any, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .session import Session

logger = logging.getLogger(__name__)

DEFAULT_SEPARATOR = "\n\n---\n\n"
SIGNAL_FINAL = "FINAL"
SIGNAL_PARTIAL = "PARTIAL"


class ResultBuffer:
    """
    Accumulates results keyed by chunk or branch name.

    The buffer wraps the dictionary it is given, so a buffer built over
    session.results writes straight through to the session. Keys are unique
    and the last write wins.

    Example:
        >>> buffer = ResultBuffer()
        >>> buffer.store("b", "second")
        >>> buffer.store("a", "first")
        >>> buffer.get_combined(" | ")
        '[a]\\nfirst | [b]\\nsecond'
    """

    def __init__(self, results: Optional[Dict[str, str]] = None) -> None:
        self._results = results if results is not None else {}

    def store(self, key: str, value: str) -> None:
        if key in self._results:
            logger.debug(f"Overwriting result {key!r}")
        self._results[key] = value

    def get(self, key: str) -> Optional[str]:
        return self._results.get(key)

    def get_all(self) -> Dict[str, str]:
        return dict(self._results)

    def remove(self, key: str) -> bool:
        """Remove a result; returns False when the key was not present."""
        return self._results.pop(key, None) is not None

    def clear(self) -> None:
        self._results.clear()

    @property
    def count(self) -> int:
        return len(self._results)

    @property
    def has_results(self) -> bool:
        return bool(self._results)

    def get_combined(self, separator: str = DEFAULT_SEPARATOR, sort_keys: bool = True) -> str:
        """
        Render all results as "[key]\\nvalue" blocks.

        Args:
            separator: Text placed between blocks
            sort_keys: Order blocks by key; insertion order otherwise

        Returns:
            Combined string, empty when there are no results
        """
        items = sorted(self._results.items()) if sort_keys else list(self._results.items())
        return separator.join(f"[{key}]\n{value}" for key, value in items)


@dataclass
class AggregateOutput:
    """Combined results as exposed to an orchestrator."""
    result_count: int
    combined: str
    signal: str = SIGNAL_PARTIAL
    results: Dict[str, str] = field(default_factory=dict)

    @property
    def is_final(self) -> bool:
        return self.signal == SIGNAL_FINAL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resultCount": self.result_count,
            "combined": self.combined,
            "signal": self.signal,
            "results": dict(self.results),
        }


def aggregate_results(
    session: 'Session',
    separator: Optional[str] = None,
    final: bool = False
) -> AggregateOutput:
    """
    Combine a session's results.

    Aggregation only reads the session, so calling it repeatedly gives the
    same output.

    Args:
        session: Session holding the results
        separator: Block separator; DEFAULT_SEPARATOR when omitted
        final: Tag the output FINAL rather than PARTIAL

    Returns:
        AggregateOutput with the combined text
    """
    buffer = session.result_buffer()
    combined = buffer.get_combined(DEFAULT_SEPARATOR if separator is None else separator)
    return AggregateOutput(
        result_count=buffer.count,
        combined=combined,
        signal=SIGNAL_FINAL if final else SIGNAL_PARTIAL,
        results=buffer.get_all(),
    )
