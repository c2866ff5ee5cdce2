"""
Image generation configuration for the picture book generator.

Uses Gemini's image-capable model, asking for both image and text modalities
so the model can comment on what it drew.
"""

import base64
import os
from typing import Optional

from dotenv import load_dotenv
from google import genai
from google.genai.types import GenerateContentConfig, Modality

# Load environment variables from .env file
load_dotenv()

# Image generation constants
IMAGE_CONSTANTS = {
    "model": os.getenv("STORYBOOK_IMAGE_MODEL", "gemini-2.5-flash-image-preview"),
    "default_mime_type": "image/png",
}


def get_image_client() -> genai.Client:
    """
    Get the Gemini client for illustration generation.

    Uses GOOGLE_API_KEY from environment.
    """
    api_key = os.getenv("GOOGLE_API_KEY")
    if not api_key:
        raise ValueError("GOOGLE_API_KEY not found in environment. Set it in .env file.")

    return genai.Client(api_key=api_key)


def get_image_model() -> str:
    """Get the image model ID."""
    return IMAGE_CONSTANTS["model"]


def get_image_config() -> GenerateContentConfig:
    """Get the default config for image generation."""
    return GenerateContentConfig(
        response_modalities=[Modality.IMAGE, Modality.TEXT]
    )


def decode_inline_data(data) -> bytes:
    """Return raw bytes for inline data that may arrive base64-encoded."""
    return base64.b64decode(data) if isinstance(data, str) else data


def extract_image_from_chunk(chunk) -> Optional[tuple[bytes, str]]:
    """
    Extract the first inline image from one streamed response chunk.

    Args:
        chunk: One item yielded by genai.Client.models.generate_content_stream()

    Returns:
        (image_bytes, mime_type) or None if the chunk carries no image
    """
    for part in _chunk_parts(chunk):
        inline_data = getattr(part, "inline_data", None)
        if inline_data and inline_data.data:
            mime_type = inline_data.mime_type or IMAGE_CONSTANTS["default_mime_type"]
            return decode_inline_data(inline_data.data), mime_type
    return None


def extract_text_from_chunk(chunk) -> str:
    """Concatenate the text parts of one streamed response chunk."""
    texts = []
    for part in _chunk_parts(chunk):
        if getattr(part, "inline_data", None):
            continue
        text = getattr(part, "text", None)
        if text:
            texts.append(text)
    return "".join(texts)


def _chunk_parts(chunk) -> list:
    """Parts of the first candidate, or an empty list for empty chunks."""
    candidates = getattr(chunk, "candidates", None)
    if not candidates:
        return []
    content = candidates[0].content
    if not content or not content.parts:
        return []
    return list(content.parts)
