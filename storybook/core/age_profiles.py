"""Age bracket lookup for prompt shaping."""

from storybook.config import AGE_GROUP_SETTINGS, STORY_CONSTANTS
from .types import AgeProfile


AGE_PROFILES = {
    age_group: AgeProfile(age_group=age_group, **settings)
    for age_group, settings in AGE_GROUP_SETTINGS.items()
}


def get_age_profile(age_group: str) -> AgeProfile:
    """Resolve an age bracket, falling back to the default bracket when unknown."""
    key = (age_group or "").strip()
    return AGE_PROFILES.get(key) or AGE_PROFILES[STORY_CONSTANTS["default_age_group"]]
