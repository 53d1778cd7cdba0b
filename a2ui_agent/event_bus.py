"""Event sink the executor publishes to.

The executor never returns results directly; every status update and
message goes through ``publish`` and each turn ends with one ``finished``.
Transports (SSE streaming, blocking send) read the events back out.
"""

import asyncio
import logging
from typing import AsyncIterator, Awaitable, Callable, Optional, Protocol, Union

from .models import Message, Task, TaskStatusUpdateEvent

logger = logging.getLogger(__name__)

Event = Union[Task, Message, TaskStatusUpdateEvent]
Listener = Callable[[Event], Awaitable[object]]


class EventBus(Protocol):
    """Publish/finish contract used by the executor."""

    async def publish(self, event: Event) -> None: ...

    async def finished(self) -> None: ...


_FINISHED = object()


class QueueEventBus:
    """
    asyncio.Queue backed event bus.

    Handles:
    - Ordered delivery to a single consumer
    - Optional listener awaited on publish, before the event is queued,
      so state it keeps is current even if nobody reads the queue
    - Dropping events published after the finish signal
    - Idempotent finish (only the first call reaches the consumer)
    """

    def __init__(self, name: str = "", listener: Optional[Listener] = None):
        self.name = name
        self.listener = listener
        self._queue: asyncio.Queue = asyncio.Queue()
        self._finished = False
        self.published_count = 0

    @property
    def is_finished(self) -> bool:
        return self._finished

    async def publish(self, event: Event) -> None:
        if self._finished:
            logger.warning(f"Dropping {getattr(event, 'kind', type(event).__name__)} event "
                           f"published after finish on bus {self.name}")
            return
        if self.listener is not None:
            await self.listener(event)
        self.published_count += 1
        await self._queue.put(event)

    async def finished(self) -> None:
        if self._finished:
            logger.debug(f"Bus {self.name} already finished")
            return
        self._finished = True
        logger.debug(f"Bus {self.name} finished after {self.published_count} events")
        await self._queue.put(_FINISHED)

    async def events(self) -> AsyncIterator[Event]:
        """Yield events in publish order until the bus finishes."""
        while True:
            event = await self._queue.get()
            if event is _FINISHED:
                return
            yield event
