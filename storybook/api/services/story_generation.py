"""
Story generation runs and their progressive delivery.

Each run executes in its own asyncio task and writes to an EventChannel.
The HTTP response only reads the channel: if the client goes away the
channel is closed and later events are dropped, but the run carries on
and still publishes the story.
"""

import asyncio
import json
import time
from typing import AsyncIterator, Callable

from storybook.core.events import (
    CompleteEvent,
    ErrorEvent,
    EventChannel,
    PageEvent,
    StatusEvent,
    StoryEvent,
)
from storybook.core.modules.page_illustrator import PageIllustrator
from storybook.core.programs.story_generator import StoryGenerator
from storybook.core.story_store import StoryStore
from storybook.core.types import StoryRequest
from ..logging import story_logger
from ..models.responses import PageResponse

# Strong references so runs are not garbage collected mid-flight
_running_tasks: set[asyncio.Task] = set()


class LoggingSink:
    """Forwards events to a channel and logs each delivered page."""

    def __init__(self, channel: EventChannel, story_id: str):
        self.channel = channel
        self.story_id = story_id

    async def send(self, event: StoryEvent) -> None:
        if isinstance(event, PageEvent):
            story_logger.page_delivered(
                self.story_id,
                event.page_number,
                event.content.has_illustration,
            )
        await self.channel.send(event)


async def run_generation(generator: StoryGenerator, request: StoryRequest, channel: EventChannel) -> None:
    """Run one generation to completion, whatever happens to the channel."""
    start_time = time.time()
    story_logger.generation_started(generator.story_id, request.theme)

    try:
        story = await generator.run(request, LoggingSink(channel, generator.story_id))
    finally:
        channel.close()

    if story is not None:
        story_logger.generation_completed(generator.story_id, story.page_count, time.time() - start_time)
    else:
        story_logger.generation_failed(generator.story_id, generator.error, generator.failed_at.value)


def start_generation(
    request: StoryRequest,
    writer: Callable[[str], str],
    illustrator: PageIllustrator,
    store: StoryStore,
) -> tuple[StoryGenerator, EventChannel]:
    """
    Start a generation run in the background.

    Must be called from a running event loop.

    Returns:
        The generator (for its story_id and state) and the channel to read events from
    """
    channel = EventChannel()
    generator = StoryGenerator(writer=writer, illustrator=illustrator, store=store)

    task = asyncio.create_task(run_generation(generator, request, channel))
    _running_tasks.add(task)
    task.add_done_callback(_running_tasks.discard)

    return generator, channel


def event_to_payload(event: StoryEvent) -> dict:
    """Wire representation of an event (camelCase keys)."""
    if isinstance(event, StatusEvent):
        return {"type": event.type, "message": event.message}
    if isinstance(event, PageEvent):
        return {
            "type": event.type,
            "pageNumber": event.page_number,
            "totalPages": event.total_pages,
            "content": PageResponse.from_domain(event.content).model_dump(by_alias=True, mode="json"),
        }
    if isinstance(event, CompleteEvent):
        return {"type": event.type, "storyId": event.story_id, "message": event.message}
    if isinstance(event, ErrorEvent):
        return {"type": event.type, "message": event.message}
    raise TypeError(f"Unknown event type: {type(event).__name__}")


def format_event(event: StoryEvent, sse: bool = False) -> str:
    """Frame one event as an NDJSON line or a Server-Sent Events message."""
    data = json.dumps(event_to_payload(event))
    if sse:
        return f"data: {data}\n\n"
    return f"{data}\n"


async def stream_events(channel: EventChannel, sse: bool = False) -> AsyncIterator[str]:
    """Yield framed events until the channel closes. Closes it if the reader stops early."""
    try:
        async for event in channel:
            yield format_event(event, sse=sse)
    finally:
        channel.close()
