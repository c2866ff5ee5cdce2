"""
Story generation pipeline.

One run takes a StoryRequest through:

    IDLE -> OUTLINE_REQUESTED -> PARSING -> ILLUSTRATING (k/N) -> PUBLISHED

and can drop to FAILED from any non-terminal state. Progress is pushed to
an event sink as it happens; the story only becomes retrievable from the
store at PUBLISHED.

The text and image model calls are blocking, so they run in worker threads
and the event loop stays free to deliver events.
"""

import asyncio
import logging
import time
import uuid
from enum import Enum
from typing import Callable, Optional

from storybook.config import STORY_CONSTANTS
from ..age_profiles import get_age_profile
from ..errors import StoryError, StoryGenerationError, StoryValidationError
from ..events import CompleteEvent, ErrorEvent, EventSink, PageEvent, StatusEvent, StoryEvent
from ..modules.page_illustrator import PageIllustrator
from ..page_parser import parse_pages
from ..prompts import build_outline_prompt
from ..story_store import StoryStore
from ..types import Page, Story, StoryMetadata, StoryRequest

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    IDLE = "idle"
    OUTLINE_REQUESTED = "outline_requested"
    PARSING = "parsing"
    ILLUSTRATING = "illustrating"
    PUBLISHED = "published"
    FAILED = "failed"


class StoryGenerator:
    """
    Runs one story request end to end.

    Args:
        writer: Callable turning the outline prompt into raw story text
            (a StoryWriter in production)
        illustrator: Illustrates one page at a time
        store: Receives the finished story
        page_count: Target number of pages (default from STORY_CONSTANTS)
        story_id: Id to publish under (a new UUID if omitted)
    """

    def __init__(
        self,
        writer: Callable[[str], str],
        illustrator: PageIllustrator,
        store: StoryStore,
        page_count: Optional[int] = None,
        story_id: Optional[str] = None,
    ):
        self.writer = writer
        self.illustrator = illustrator
        self.store = store
        self.page_count = page_count or STORY_CONSTANTS["target_page_count"]
        self.story_id = story_id or str(uuid.uuid4())

        self.state = PipelineState.IDLE
        self.pages_done = 0
        self.pages_total = 0
        self.error: Optional[StoryError] = None
        self.failed_at: Optional[PipelineState] = None
        self._sink: Optional[EventSink] = None

    def _transition(self, state: PipelineState) -> None:
        logger.debug(
            f"{self.state.value} -> {state.value}",
            extra={"story_id": self.story_id, "stage": state.value},
        )
        self.state = state

    async def _emit(self, event: StoryEvent) -> None:
        """Send an event; a broken sink is dropped without stopping the run."""
        if self._sink is None:
            return
        try:
            await self._sink.send(event)
        except Exception as e:
            logger.warning(
                f"Event sink failed, no further events will be sent: {e}",
                extra={"story_id": self.story_id},
            )
            self._sink = None

    async def _fail(self, error: StoryError) -> None:
        self.error = error
        self.failed_at = self.state
        self._transition(PipelineState.FAILED)
        await self._emit(ErrorEvent(message=str(error) or "Failed to generate story"))

    async def run(self, request: StoryRequest, sink: Optional[EventSink] = None) -> Optional[Story]:
        """
        Generate, illustrate and publish a story.

        Args:
            request: What to write about
            sink: Receives progress events; always ends with one complete or error event

        Returns:
            The published story, or None if the run failed (see self.error)
        """
        if self.state is not PipelineState.IDLE:
            raise RuntimeError(f"StoryGenerator already ran (state: {self.state.value})")

        self._sink = sink
        start_time = time.time()

        missing = request.missing_fields()
        if missing:
            await self._fail(StoryValidationError(missing))
            return None

        try:
            raw_text = await self._request_outline(request)
            if raw_text is None:
                return None

            self._transition(PipelineState.PARSING)
            pages = parse_pages(raw_text, self.page_count)

            illustrated = await self._illustrate(pages, request)

            story = Story(
                id=self.story_id,
                pages=illustrated,
                metadata=StoryMetadata.from_request(request),
            )
            await self._emit(StatusEvent("Saving your story..."))
            self.store.publish(story)
            self._transition(PipelineState.PUBLISHED)

        except Exception as e:
            logger.error(
                f"Story generation failed: {e}",
                extra={"story_id": self.story_id, "stage": self.state.value},
                exc_info=True,
            )
            error = e if isinstance(e, StoryError) else StoryGenerationError(str(e))
            await self._fail(error)
            return None

        logger.info(
            f"Story {self.story_id} published in {time.time() - start_time:.1f}s",
            extra={"story_id": self.story_id, "stage": "published"},
        )
        await self._emit(CompleteEvent(story_id=self.story_id))
        return story

    async def _request_outline(self, request: StoryRequest) -> Optional[str]:
        """Ask the text model for the story; None means the run has failed."""
        self._transition(PipelineState.OUTLINE_REQUESTED)
        await self._emit(StatusEvent("Starting story generation..."))
        await self._emit(StatusEvent("Creating story outline..."))

        prompt = build_outline_prompt(request, get_age_profile(request.age_group), self.page_count)

        try:
            raw_text = await asyncio.to_thread(self.writer, prompt)
        except Exception as e:
            logger.error(
                f"Story text generation failed: {e}",
                extra={"story_id": self.story_id, "stage": "outline", "error_type": type(e).__name__},
                exc_info=True,
            )
            error = StoryGenerationError(str(e) or "Failed to generate story")
            error.__cause__ = e
            await self._fail(error)
            return None

        if not raw_text or not raw_text.strip():
            await self._fail(StoryGenerationError("The model returned no story text"))
            return None

        return raw_text

    async def _illustrate(self, pages: list[Page], request: StoryRequest) -> list[Page]:
        """Illustrate pages strictly one after another, emitting each as it finishes."""
        self.pages_total = len(pages)
        self.pages_done = 0
        self._transition(PipelineState.ILLUSTRATING)
        await self._emit(StatusEvent(f"Writing pages... {self.pages_total} pages ready for illustration"))

        # Each step of the generator runs one blocking image request in a worker thread
        results = self.illustrator.illustrate_story(pages, request.characters, request.theme)
        illustrated = []
        for _ in pages:
            await self._emit(
                StatusEvent(f"Illustrating page {self.pages_done + 1} of {self.pages_total}...")
            )
            result = await asyncio.to_thread(next, results)
            illustrated.append(result)
            self.pages_done += 1

            await self._emit(
                PageEvent(
                    page_number=result.page_number,
                    total_pages=self.pages_total,
                    content=result,
                )
            )

        return illustrated
