"""Pydantic models for API requests.

Field names are camelCase on the wire; snake_case names are accepted too.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from storybook.core.types import Character, StoryRequest


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CharacterInput(CamelModel):
    """One character in the requested cast."""

    name: str = Field(default="", max_length=100)
    description: str = Field(default="", max_length=500)


class GenerateStoryRequest(CamelModel):
    """Request body for generating a new story.

    Required fields are checked by the story pipeline so a missing field
    comes back as a 400 with the list of what is missing.
    """

    theme: str = Field(default="", max_length=100, description="Story theme", examples=["space"])
    characters: list[CharacterInput] = Field(default_factory=list, max_length=20)
    age_group: str = Field(default="", max_length=20, description="Reader age bracket", examples=["6-8"])
    moral: Optional[str] = Field(default=None, max_length=500)
    custom_ideas: Optional[str] = Field(default=None, max_length=2000)

    def to_domain(self) -> StoryRequest:
        return StoryRequest(
            theme=self.theme.strip(),
            characters=tuple(
                Character(name=c.name.strip(), description=c.description.strip())
                for c in self.characters
                if c.name.strip()
            ),
            age_group=self.age_group.strip(),
            moral=(self.moral or "").strip() or None,
            custom_ideas=(self.custom_ideas or "").strip() or None,
        )


class RegeneratePageRequest(CamelModel):
    """Request body for regenerating one page's illustration."""

    story_id: str
    page_number: int


class ExportPdfRequest(CamelModel):
    """Request body for exporting a story as PDF."""

    story_id: str
