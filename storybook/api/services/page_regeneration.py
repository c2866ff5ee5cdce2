"""
Single-page regeneration.

Re-runs the illustration step for one page of a published story and swaps
the result into the same page-number slot. The story id and every other
page stay exactly as they were. Regenerations of the same story run one at
a time; other stories are unaffected.
"""

import asyncio
import time

from storybook.core.modules.page_illustrator import PageIllustrator
from storybook.core.story_store import StoryStore
from storybook.core.types import Page
from ..logging import story_logger


async def regenerate_page(
    story_id: str,
    page_number: int,
    store: StoryStore,
    illustrator: PageIllustrator,
) -> Page:
    """
    Regenerate a single page illustration and update the story.

    Args:
        story_id: ID of the story
        page_number: Page number to regenerate (not the list position)
        store: Holds the published story
        illustrator: Illustration generator

    Returns:
        The new page. If illustration failed again the page carries the error marker.

    Raises:
        StoryNotFoundError: Unknown story id
        PageNotFoundError: The story has no such page
    """
    start_time = time.time()

    async with store.lock(story_id):
        story = store.get(story_id)
        page = store.get_page(story_id, page_number)

        new_page = await asyncio.to_thread(
            illustrator.illustrate_page,
            page,
            story.metadata.characters,
            story.metadata.theme,
        )
        store.replace_page(story_id, new_page)

    story_logger.page_regenerated(story_id, page_number, new_page.has_illustration, time.time() - start_time)
    return new_page
