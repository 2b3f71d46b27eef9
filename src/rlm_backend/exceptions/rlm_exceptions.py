"""
Chunking and session exceptions for the RLM backend.

Typed errors surfaced at the boundary of the chunking engine and the
session model. Every error carries an optional list of suggestions that the
CLI renders for the user.

Error kinds:
- InvalidArgumentError: malformed pattern, range, index or option value
- PreconditionNotMetError: operation requested in the wrong session state
- ChunkingCancelledError: cooperative cancellation observed at a chunk boundary
- SessionStoreError: persisted session could not be read or written
"""

from typing import List, Optional, Tuple


class RlmError(Exception):
    """Base exception for all RLM backend errors."""

    def __init__(
        self,
        message: str,
        suggestions: Optional[List[str]] = None
    ) -> None:
        """
        Initialize RLM error.

        Args:
            message: Error description
            suggestions: List of suggested fixes
        """
        super().__init__(message)
        self.message = message
        self.suggestions = suggestions or []

    def context_lines(self) -> List[str]:
        """Lines printed directly under the message."""
        return []

    def sections(self) -> List[Tuple[str, List[str]]]:
        """Titled, numbered lists printed after the message."""
        return [("Suggestions", self.suggestions)]

    def __str__(self) -> str:
        lines = [self.message, *self.context_lines()]
        for title, items in self.sections():
            if items:
                lines.append(f"\n{title}:")
                lines.extend(f"  {i}. {item}" for i, item in enumerate(items, 1))
        return "\n".join(lines)


class InvalidArgumentError(RlmError):
    """Raised when an argument is malformed, before any output is produced."""

    def __init__(
        self,
        message: str,
        argument: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ) -> None:
        super().__init__(message, suggestions)
        self.argument = argument


class PreconditionNotMetError(RlmError):
    """Raised when the session is not in the state an operation requires."""
    pass


class ChunkingCancelledError(RlmError):
    """Raised at the next chunk boundary after cancellation was requested."""

    def __init__(self, message: str = "Chunking was cancelled", emitted: int = 0) -> None:
        super().__init__(message)
        self.emitted = emitted


class SessionStoreError(RlmError):
    """Raised when a session file cannot be read or written."""

    def __init__(
        self,
        message: str,
        session_path: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ) -> None:
        super().__init__(message, suggestions)
        self.session_path = session_path
