"""
Session Package

Session state, navigation and result aggregation. Persistence lives in
services.session_store; nothing here performs file I/O.
"""

from .session import (
    Session,
    SessionProgress,
    MAX_RECURSION_DEPTH,
    child_session_id,
)

from .result_buffer import (
    ResultBuffer,
    AggregateOutput,
    aggregate_results,
    DEFAULT_SEPARATOR,
    SIGNAL_FINAL,
    SIGNAL_PARTIAL,
)

from .navigation import parse_slice_range, resolve_jump_target

__all__ = [
    "Session",
    "SessionProgress",
    "MAX_RECURSION_DEPTH",
    "child_session_id",
    "ResultBuffer",
    "AggregateOutput",
    "aggregate_results",
    "DEFAULT_SEPARATOR",
    "SIGNAL_FINAL",
    "SIGNAL_PARTIAL",
    "parse_slice_range",
    "resolve_jump_target",
]
