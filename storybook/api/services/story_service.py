"""Story service: generation, lookup, regeneration and export."""

import asyncio
from typing import Callable, Optional

from storybook.core.document import render_story_pdf
from storybook.core.errors import StoryValidationError
from storybook.core.events import EventChannel
from storybook.core.modules.page_illustrator import PageIllustrator
from storybook.core.story_store import StoryStore
from storybook.core.types import Page, Story, StoryRequest
from .page_regeneration import regenerate_page
from .story_generation import start_generation


class StoryService:
    """
    Service for creating and managing generated stories.

    The text writer and illustrator are created on first use so that
    read-only operations work without model credentials.
    """

    def __init__(
        self,
        store: StoryStore,
        writer: Optional[Callable[[str], str]] = None,
        illustrator: Optional[PageIllustrator] = None,
    ):
        self.store = store
        self._writer = writer
        self._illustrator = illustrator

    @property
    def writer(self) -> Callable[[str], str]:
        if self._writer is None:
            # Import here to avoid slow startup
            from storybook.config import get_inference_lm
            from storybook.core.modules.story_writer import StoryWriter

            self._writer = StoryWriter(lm=get_inference_lm())
        return self._writer

    @property
    def illustrator(self) -> PageIllustrator:
        if self._illustrator is None:
            self._illustrator = PageIllustrator()
        return self._illustrator

    def start_story(self, request: StoryRequest) -> tuple[str, EventChannel]:
        """
        Validate a request and start generating it in the background.

        Returns:
            (story_id, channel) - the id the story will be published under
            and the channel carrying progress events

        Raises:
            StoryValidationError: If required fields are missing
        """
        missing = request.missing_fields()
        if missing:
            raise StoryValidationError(missing)

        generator, channel = start_generation(
            request,
            writer=self.writer,
            illustrator=self.illustrator,
            store=self.store,
        )
        return generator.story_id, channel

    def get_story(self, story_id: str) -> Story:
        return self.store.get(story_id)

    def get_page(self, story_id: str, page_number: int) -> Page:
        return self.store.get_page(story_id, page_number)

    async def regenerate_page(self, story_id: str, page_number: int) -> Page:
        # Fail fast on unknown ids before building an illustrator
        self.store.get_page(story_id, page_number)
        return await regenerate_page(story_id, page_number, self.store, self.illustrator)

    async def export_pdf(self, story_id: str) -> bytes:
        story = self.store.get(story_id)
        return await asyncio.to_thread(render_story_pdf, story)
