# Text generation
from .story_writer import StoryWriter

# Illustration
from .page_illustrator import PageIllustrator, ILLUSTRATION_ERROR

__all__ = [
    "StoryWriter",
    "PageIllustrator",
    "ILLUSTRATION_ERROR",
]
