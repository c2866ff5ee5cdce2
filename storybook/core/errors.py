"""Error types raised by the story pipeline."""


class StoryError(Exception):
    """Base class for story pipeline errors."""


class StoryValidationError(StoryError, ValueError):
    """The request is missing required fields."""

    def __init__(self, missing_fields: list[str]):
        self.missing_fields = list(missing_fields)
        super().__init__(f"Missing required fields: {', '.join(self.missing_fields)}")


class StoryGenerationError(StoryError):
    """The story text could not be generated."""


class StoryNotFoundError(StoryError, LookupError):
    """No story is stored under the requested id."""

    def __init__(self, story_id: str, message: str = "Story not found"):
        self.story_id = story_id
        super().__init__(message)


class PageNotFoundError(StoryNotFoundError):
    """The story exists but has no page with the requested number."""

    def __init__(self, story_id: str, page_number: int):
        self.page_number = page_number
        super().__init__(story_id, "Page not found")
