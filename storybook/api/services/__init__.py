"""Services for story generation."""

from .story_service import StoryService
from .story_generation import start_generation, stream_events
from .page_regeneration import regenerate_page

__all__ = ["StoryService", "start_generation", "stream_events", "regenerate_page"]
