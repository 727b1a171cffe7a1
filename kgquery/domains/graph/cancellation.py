"""
Cancellation - Cooperative cancellation signal shared by caller and callee.
"""

from __future__ import annotations

import asyncio

from kgquery.config.errors import OperationCancelledError

__all__ = ["CancellationToken"]


class CancellationToken:
    """
    Cooperative cancellation signal.

    The caller keeps a reference and calls ``cancel()``; long-running
    operations check ``raise_if_cancelled()`` between await points and
    forward the same token to the repository.

    Example:
        >>> token = CancellationToken()
        >>> task = asyncio.create_task(engine.execute_query(query, token))
        >>> token.cancel()
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Signal cancellation. Idempotent."""
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError()

    async def wait(self) -> None:
        """Block until cancellation is signalled."""
        await self._event.wait()

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"
