"""One-shot timers that report back into a session inbox."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class SessionTimer:
    """Fires ``on_fire(token)`` once after ``delay_s`` unless cancelled or re-armed first."""

    def __init__(self, on_fire: Callable[[int], None], *, name: str = "timer") -> None:
        self._on_fire = on_fire
        self._name = name
        self._task: asyncio.Task | None = None

    @property
    def armed(self) -> bool:
        return self._task is not None and not self._task.done()

    def arm(self, delay_s: float, token: int) -> None:
        self.cancel()
        if delay_s <= 0:
            return
        self._task = asyncio.create_task(self._run(delay_s, token))

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _run(self, delay_s: float, token: int) -> None:
        await asyncio.sleep(delay_s)
        logger.debug("%s fired token=%d", self._name, token)
        self._on_fire(token)


__all__ = ["SessionTimer"]
