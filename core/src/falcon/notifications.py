from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator

from falcon.contracts.command_contracts.observer import Observer
from falcon.contracts.result_contracts.result import FalconResult

_logger = logging.getLogger("sfdx_falcon.notifications")


def update_observer(observer: Observer | None, message: str) -> None:
    """Send a message to the observer, if there is one."""
    if observer is None:
        return
    update = getattr(observer, "update", None)
    if not callable(update):
        _logger.debug("Observer %r has no update(); dropping %r", observer, message)
        return
    update(message)


class LoggingObserver:
    """Observer that relays progress messages to a logger."""

    def __init__(self, logger: logging.Logger | None = None, *, level: int = logging.INFO) -> None:
        self._logger = logger or logging.getLogger("sfdx_falcon.progress")
        self._level = level

    def update(self, message: str) -> None:
        self._logger.log(self._level, message)


@contextlib.asynccontextmanager
async def progress_notifications(
    message: str,
    interval_s: float,
    result: FalconResult,
    observer: Observer | None,
) -> AsyncIterator[None]:
    """
    Tick `[<elapsed>] <message>` to the observer every `interval_s` seconds.

    The ticker task is cancelled and awaited on exit, whatever the outcome.
    """
    if observer is None or interval_s <= 0:
        yield
        return

    async def _tick() -> None:
        while True:
            await asyncio.sleep(interval_s)
            update_observer(observer, f"[{result.duration_string}] {message}")

    ticker = asyncio.create_task(_tick())
    try:
        yield
    finally:
        ticker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await ticker
