"""
Prompt construction for story text and page illustrations.

The outline prompt fixes the tagged page format that page_parser reads back:

    [PAGE 1 - TITLE]
    Title: ...
    Text: ...
    Illustration: ...

    [PAGE 2]
    Text: ...
    Illustration: ...
"""

from typing import Optional, Sequence

from storybook.config import STORY_CONSTANTS
from .types import AgeProfile, Character, Page, StoryRequest


ILLUSTRATION_STYLE_PREFIX = (
    "Children's book illustration style: watercolor, soft colors, whimsical, "
    "friendly, age-appropriate."
)


def build_outline_prompt(
    request: StoryRequest,
    age_profile: AgeProfile,
    page_count: Optional[int] = None,
) -> str:
    """Build the single prompt that asks the text model for the whole story."""
    page_count = page_count or STORY_CONSTANTS["target_page_count"]
    character_list = ", ".join(c.to_prompt_string() for c in request.characters)
    moral = request.moral or STORY_CONSTANTS["default_moral"]
    ideas_line = f"ADDITIONAL IDEAS: {request.custom_ideas}\n" if request.custom_ideas else ""

    return f"""Create a children's story with the following specifications:

THEME: {request.theme}
CHARACTERS: {character_list}
AGE GROUP: {request.age_group} years old
MORAL/LESSON: {moral}
{ideas_line}
REQUIREMENTS:
1. Create a story with exactly {page_count} pages (including title page)
2. Use vocabulary appropriate for {age_profile.age_group} year olds: {age_profile.vocabulary}
3. Sentence complexity: {age_profile.complexity}
4. Each page should be {age_profile.word_count} words
5. Include engaging dialogue and descriptive language
6. Make it fun, engaging, and educational
7. End with a clear resolution that reinforces the moral

FORMAT YOUR RESPONSE EXACTLY LIKE THIS:
[PAGE 1 - TITLE]
Title: [Story Title]
Text: [Title page text, author credit]
Illustration: [Description of cover illustration]

[PAGE 2]
Text: [Story text for page 2]
Illustration: [Description of what should be illustrated]

[PAGE 3]
Text: [Story text for page 3]
Illustration: [Description of what should be illustrated]

Continue this format for all {page_count} pages. Make sure the story has a clear beginning, middle, and end."""


def build_illustration_prompt(
    page: Page,
    characters: Sequence[Character],
    theme: str,
) -> str:
    """Compose the image request for one page.

    Falls back to the opening of the page text when the page has no scene description.
    """
    roster = ", ".join(c.to_roster_entry() for c in characters)
    scene = page.illustration_prompt.strip() or page.text[: STORY_CONSTANTS["snippet_length"]]

    return (
        f"{ILLUSTRATION_STYLE_PREFIX} Theme: {theme}. "
        f"Characters: {roster}. "
        f"Scene: {scene}. "
        "Create a single beautiful children's book illustration for this scene."
    )
