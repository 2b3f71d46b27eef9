"""
Cancellation Module

Cooperative cancellation for chunk streams. Chunkers check the token between
chunk emissions only; a chunk that is being built always completes.

Components:
- CancellationToken: Flag shared between the caller and a running stream
- cancel_on_interrupt: Context manager that cancels a token on Ctrl-C
"""

import signal
import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from ...exceptions import ChunkingCancelledError

logger = logging.getLogger(__name__)


class CancellationToken:
    """
    Cancellation flag checked by chunkers at emission boundaries.

    Example:
        >>> token = CancellationToken()
        >>> token.is_cancelled
        False
        >>> token.cancel()
        >>> token.is_cancelled
        True
    """

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Request cancellation. Idempotent."""
        if not self._cancelled:
            logger.debug("Cancellation requested")
        self._cancelled = True

    def raise_if_cancelled(self, emitted: int = 0) -> None:
        """
        Raise if cancellation was requested.

        Args:
            emitted: Number of chunks emitted so far, reported on the error

        Raises:
            ChunkingCancelledError: If the token has been cancelled
        """
        if self._cancelled:
            raise ChunkingCancelledError(emitted=emitted)


def check_cancelled(token: Optional[CancellationToken], emitted: int = 0) -> None:
    """Raise ChunkingCancelledError when an optional token was cancelled."""
    if token is not None:
        token.raise_if_cancelled(emitted)


@contextmanager
def cancel_on_interrupt(token: CancellationToken) -> Iterator[CancellationToken]:
    """
    Cancel the token when SIGINT arrives while the block runs.

    The previous handler is restored on exit. Outside the main thread signal
    handlers cannot be installed, so the token is yielded unchanged.
    """
    if threading.current_thread() is not threading.main_thread():
        yield token
        return

    def _handler(signum, frame):
        logger.info("Interrupt received, cancelling at the next chunk boundary")
        token.cancel()

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield token
    finally:
        signal.signal(signal.SIGINT, previous)
