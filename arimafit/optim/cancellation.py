"""
Cooperative cancellation for long-running fits.
"""

import threading


class CancellationToken:
    """Thread-safe flag that asks a running optimization to stop.

    The optimizer polls the token once per iteration and returns its best point
    so far when the token has been cancelled. A token can be shared by several
    fits and cannot be reset once cancelled.

    Examples:
        >>> token = CancellationToken()
        >>> token.cancelled
        False
        >>> token.cancel()
        >>> token.cancelled
        True
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation. Safe to call from any thread, any number of times."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        """Whether cancellation has been requested."""
        return self._event.is_set()

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"
