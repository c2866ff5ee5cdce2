"""
Centralized domain types for the picture book generator.

All dataclasses that are used across multiple modules are defined here
to make data flow explicit and avoid circular imports.
"""

import base64
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional


# =============================================================================
# Request Types
# =============================================================================


@dataclass(frozen=True)
class Character:
    """A member of the story's cast as described by the requester."""

    name: str
    description: str = ""

    def to_prompt_string(self) -> str:
        """Render as 'name (description)' for the outline prompt."""
        if self.description:
            return f"{self.name} ({self.description})"
        return self.name

    def to_roster_entry(self) -> str:
        """Render as 'name: description' for illustration prompts."""
        if self.description:
            return f"{self.name}: {self.description}"
        return self.name


@dataclass(frozen=True)
class StoryRequest:
    """What the reader asked for: theme, cast, age bracket and optional extras."""

    theme: str
    characters: tuple[Character, ...]
    age_group: str
    moral: Optional[str] = None
    custom_ideas: Optional[str] = None

    def missing_fields(self) -> list[str]:
        """Names of required fields that are absent or blank."""
        missing = []
        if not self.theme or not self.theme.strip():
            missing.append("theme")
        if not any(c.name for c in self.characters):
            missing.append("characters")
        if not self.age_group or not self.age_group.strip():
            missing.append("ageGroup")
        return missing


@dataclass(frozen=True)
class AgeProfile:
    """Prompt-shaping guidance for one age bracket."""

    age_group: str
    vocabulary: str
    complexity: str
    word_count: str  # Target words per page, e.g. "40-80"


# =============================================================================
# Page Types
# =============================================================================


@dataclass(frozen=True)
class Illustration:
    """A generated image payload."""

    data: bytes
    mime_type: str = "image/png"

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")


@dataclass(frozen=True)
class Page:
    """One page of a story.

    page_number is assigned by the parser and is the key used for
    regeneration. It is not the position in the story's page list.
    """

    page_number: int
    text: str
    title: Optional[str] = None
    illustration_prompt: str = ""
    illustration: Optional[Illustration] = None
    image_description: Optional[str] = None
    error: Optional[str] = None

    @property
    def has_illustration(self) -> bool:
        return self.illustration is not None

    def with_illustration(
        self,
        illustration: Illustration,
        image_description: Optional[str] = None,
    ) -> "Page":
        """Copy of this page carrying a fresh illustration and no error."""
        return replace(
            self,
            illustration=illustration,
            image_description=image_description or None,
            error=None,
        )

    def with_error(self, error: str) -> "Page":
        """Copy of this page marked as illustration-less."""
        return replace(self, illustration=None, image_description=None, error=error)

    def to_canonical_string(self) -> str:
        """Serialize back into the tagged outline format."""
        header = f"[PAGE {self.page_number}]"
        lines = [header]
        if self.title:
            lines.append(f"Title: {self.title}")
        lines.append(f"Text: {self.text}")
        lines.append(f"Illustration: {self.illustration_prompt}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return f"Page {self.page_number}: {self.text}"


# =============================================================================
# Story Types
# =============================================================================


@dataclass(frozen=True)
class StoryMetadata:
    """Request data kept alongside a story for regeneration and export."""

    theme: str
    characters: tuple[Character, ...]
    age_group: str
    moral: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_request(cls, request: StoryRequest) -> "StoryMetadata":
        return cls(
            theme=request.theme,
            characters=request.characters,
            age_group=request.age_group,
            moral=request.moral,
        )


@dataclass
class Story:
    """A published story: an id, its pages in page-number order, and metadata."""

    id: str
    pages: list[Page]
    metadata: StoryMetadata

    @property
    def title(self) -> str:
        """Title of the first page that has one."""
        for page in self.pages:
            if page.title:
                return page.title
        return ""

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def find_page(self, page_number: int) -> Optional[Page]:
        """Look up a page by its page number (not its list position)."""
        for page in self.pages:
            if page.page_number == page_number:
                return page
        return None

    def snapshot(self) -> "Story":
        """Copy whose page list can change without touching this story."""
        return Story(id=self.id, pages=list(self.pages), metadata=self.metadata)

    def to_formatted_string(self) -> str:
        """Plain-text rendition of the story for logs and the CLI."""
        lines = []
        if self.title:
            lines.append(f"# {self.title}")
            lines.append("")
        for page in self.pages:
            lines.append(f"## Page {page.page_number}")
            lines.append(page.text)
            lines.append("")
        return "\n".join(lines).rstrip() + "\n"
