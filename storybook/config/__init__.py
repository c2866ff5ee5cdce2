"""
Configuration module for the picture book generator.

Re-exports model factories and story constants.
"""

from .llm import get_inference_lm, get_inference_model_name
from .story import STORY_CONSTANTS, AGE_GROUP_SETTINGS
from .image import (
    IMAGE_CONSTANTS,
    get_image_client,
    get_image_model,
    get_image_config,
    extract_image_from_chunk,
    extract_text_from_chunk,
)

__all__ = [
    # LLM
    "get_inference_lm",
    "get_inference_model_name",
    # Story
    "STORY_CONSTANTS",
    "AGE_GROUP_SETTINGS",
    # Image
    "IMAGE_CONSTANTS",
    "get_image_client",
    "get_image_model",
    "get_image_config",
    "extract_image_from_chunk",
    "extract_text_from_chunk",
]
