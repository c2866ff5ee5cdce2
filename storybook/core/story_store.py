"""
In-memory table of published stories.

A story appears here only once its whole generation run has finished.
After that the only mutation is replacing a single page. Multi-step edits
on one story (look up, regenerate, replace) are serialized with that
story's lock; different stories never wait on each other.
"""

import asyncio
import logging
import threading

from .errors import PageNotFoundError, StoryNotFoundError
from .types import Page, Story

logger = logging.getLogger(__name__)


class StoryStore:
    """Stories keyed by id. Readers always get a snapshot, never the stored record."""

    def __init__(self):
        self._stories: dict[str, Story] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._table_lock = threading.Lock()

    def __len__(self) -> int:
        with self._table_lock:
            return len(self._stories)

    def __contains__(self, story_id: str) -> bool:
        with self._table_lock:
            return story_id in self._stories

    def lock(self, story_id: str) -> asyncio.Lock:
        """
        Lock that serializes edits to one story.

        Raises:
            StoryNotFoundError: If no story has this id
        """
        with self._table_lock:
            if story_id not in self._stories:
                raise StoryNotFoundError(story_id)
            return self._locks[story_id]

    def publish(self, story: Story) -> None:
        """
        Make a finished story retrievable.

        Raises:
            ValueError: If the id is already taken or page numbers repeat
        """
        pages = sorted(story.pages, key=lambda p: p.page_number)
        numbers = [p.page_number for p in pages]
        if len(set(numbers)) != len(numbers):
            raise ValueError(f"Story {story.id} has duplicate page numbers: {numbers}")

        with self._table_lock:
            if story.id in self._stories:
                raise ValueError(f"Story {story.id} is already published")
            self._stories[story.id] = Story(id=story.id, pages=pages, metadata=story.metadata)
            self._locks[story.id] = asyncio.Lock()

        logger.info(f"Published story {story.id} with {len(pages)} pages", extra={"story_id": story.id})

    def get(self, story_id: str) -> Story:
        """
        Snapshot of a stored story.

        Raises:
            StoryNotFoundError: If no story has this id
        """
        with self._table_lock:
            story = self._stories.get(story_id)
            if story is None:
                raise StoryNotFoundError(story_id)
            return story.snapshot()

    def get_page(self, story_id: str, page_number: int) -> Page:
        """
        Look up one page by page number.

        Raises:
            StoryNotFoundError: If no story has this id
            PageNotFoundError: If the story has no such page
        """
        page = self.get(story_id).find_page(page_number)
        if page is None:
            raise PageNotFoundError(story_id, page_number)
        return page

    def replace_page(self, story_id: str, page: Page) -> None:
        """
        Swap in a new version of the page with the same page number.

        Other pages and the story id are left untouched.

        Raises:
            StoryNotFoundError: If no story has this id
            PageNotFoundError: If the story has no such page
        """
        with self._table_lock:
            story = self._stories.get(story_id)
            if story is None:
                raise StoryNotFoundError(story_id)
            for index, existing in enumerate(story.pages):
                if existing.page_number == page.page_number:
                    story.pages[index] = page
                    return
        raise PageNotFoundError(story_id, page.page_number)
