"""FastAPI dependency injection for services and the story store."""

from typing import Annotated

from fastapi import Depends

from storybook.core.story_store import StoryStore
from .services.story_service import StoryService

# One store per process; stories live as long as the server does
_story_store = StoryStore()
_story_service = None


def get_story_store() -> StoryStore:
    """Get the process-wide story store."""
    return _story_store


def get_story_service(
    store: Annotated[StoryStore, Depends(get_story_store)]
) -> StoryService:
    """Get the StoryService bound to the store.

    The service is reused across requests so the model clients are built once.
    """
    global _story_service
    if _story_service is None or _story_service.store is not store:
        _story_service = StoryService(store)
    return _story_service


# Type alias for cleaner route signatures
Service = Annotated[StoryService, Depends(get_story_service)]
