"""
Story generation constants for the picture book generator.

Page target and age-bracket guidance used to shape the outline prompt.
"""

import os

# Story generation constants
STORY_CONSTANTS = {
    "target_page_count": int(os.getenv("STORYBOOK_PAGE_COUNT", "7")),  # Page 1 is the title page
    "default_age_group": "6-8",
    "default_moral": "A positive life lesson",
    "snippet_length": 100,  # Characters of page text used when no scene is described
}

# Vocabulary, sentence complexity and words per page by age bracket
AGE_GROUP_SETTINGS = {
    "3-5": {
        "vocabulary": "simple, common words",
        "complexity": "short, simple sentences",
        "word_count": "20-40",
    },
    "6-8": {
        "vocabulary": "common words with some new vocabulary",
        "complexity": "medium-length sentences with basic conjunctions",
        "word_count": "40-80",
    },
    "9-12": {
        "vocabulary": "varied vocabulary with context clues",
        "complexity": "complex sentences with multiple clauses",
        "word_count": "80-150",
    },
}
