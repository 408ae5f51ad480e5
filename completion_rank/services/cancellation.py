"""Cancellation token shared by every request of one completion session."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

logger = logging.getLogger(__name__)


class CancellationToken:
    """Observable "cancelled" flag.

    Example:
        token = CancellationToken()
        unsubscribe = token.on_cancelled(lambda: print("stopped"))
        token.cancel()  # prints "stopped"
        await token.wait()  # returns immediately once cancelled
    """

    NONE: CancellationToken

    def __init__(self) -> None:
        self._cancelled = False
        self._callbacks: list[Callable[[], None]] = []

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Cancel the token and notify subscribers once."""
        if self._cancelled:
            return
        self._cancelled = True
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                logger.error(f"Cancellation callback error: {e}")

    def on_cancelled(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register a callback. Returns an unsubscribe function.

        Runs immediately if the token is already cancelled.
        """
        if self._cancelled:
            callback()
            return lambda: None
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    async def wait(self) -> None:
        """Wait until the token is cancelled."""
        if self._cancelled:
            return
        loop = asyncio.get_running_loop()
        future: asyncio.Future[None] = loop.create_future()

        def resolve() -> None:
            if not future.done():
                loop.call_soon_threadsafe(_set_done, future)

        unsubscribe = self.on_cancelled(resolve)
        try:
            await future
        finally:
            unsubscribe()


def _set_done(future: asyncio.Future[None]) -> None:
    if not future.done():
        future.set_result(None)


class _NeverCancelled(CancellationToken):
    """Shared token for callers that never cancel."""

    def cancel(self) -> None:
        logger.debug("Ignoring cancel() on CancellationToken.NONE")

    def on_cancelled(self, callback: Callable[[], None]) -> Callable[[], None]:
        return lambda: None


CancellationToken.NONE = _NeverCancelled()
