import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from app.errors import Superseded

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SubmissionGate:
    """Keeps at most one in-flight submission per client key.

    A newer submission cancels the older one, whose caller gets Superseded.
    """

    def __init__(self) -> None:
        self._inflight: dict[str, asyncio.Task] = {}

    def in_flight(self, key: str) -> bool:
        task = self._inflight.get(key)
        return task is not None and not task.done()

    async def run(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        previous = self._inflight.get(key)
        if previous is not None and not previous.done():
            logger.info("submission superseded key=%s", key)
            previous.cancel()

        task = asyncio.ensure_future(factory())
        self._inflight[key] = task
        try:
            return await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            raise Superseded() from None
        finally:
            if self._inflight.get(key) is task:
                del self._inflight[key]


gate = SubmissionGate()
