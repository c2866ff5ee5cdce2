"""
Progress events emitted while a story is generated, and the channel that carries them.

A run emits zero or more status events, one page event per finished page
(increasing page number), then exactly one terminal event: complete or error.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import AsyncIterator, Protocol, Union

from .types import Page

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusEvent:
    message: str
    type: str = "status"
    is_terminal = False


@dataclass(frozen=True)
class PageEvent:
    page_number: int
    total_pages: int
    content: Page
    type: str = "page"
    is_terminal = False


@dataclass(frozen=True)
class CompleteEvent:
    story_id: str
    message: str = "Story generation complete!"
    type: str = "complete"
    is_terminal = True


@dataclass(frozen=True)
class ErrorEvent:
    message: str
    type: str = "error"
    is_terminal = True


StoryEvent = Union[StatusEvent, PageEvent, CompleteEvent, ErrorEvent]


class EventSink(Protocol):
    """Anything that accepts an ordered sequence of events."""

    async def send(self, event: StoryEvent) -> None: ...


_END = object()


class EventChannel:
    """
    One-way, in-process event stream for a single generation run.

    The writer calls send(); the reader iterates the channel. A terminal
    event closes the channel. Once closed (by a terminal event or by the
    reader going away) further sends are dropped.
    """

    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, event: StoryEvent) -> None:
        if self._closed:
            logger.debug(f"Channel closed, dropping {event.type} event")
            return
        self._queue.put_nowait(event)
        if event.is_terminal:
            self.close()

    def close(self) -> None:
        """Stop accepting events and let the reader finish."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_END)

    async def __aiter__(self) -> AsyncIterator[StoryEvent]:
        while True:
            item = await self._queue.get()
            if item is _END:
                return
            yield item
