from .story_text import StoryTextSignature

__all__ = [
    "StoryTextSignature",
]
