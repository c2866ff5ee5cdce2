# Picture Book Generator - Core Domain

# Re-export types for convenient access
from .types import (
    Character,
    StoryRequest,
    AgeProfile,
    Illustration,
    Page,
    StoryMetadata,
    Story,
)
from .errors import (
    StoryError,
    StoryValidationError,
    StoryGenerationError,
    StoryNotFoundError,
    PageNotFoundError,
)

__all__ = [
    "Character",
    "StoryRequest",
    "AgeProfile",
    "Illustration",
    "Page",
    "StoryMetadata",
    "Story",
    "StoryError",
    "StoryValidationError",
    "StoryGenerationError",
    "StoryNotFoundError",
    "PageNotFoundError",
]
