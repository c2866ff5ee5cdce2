"""
LLM configuration for the picture book generator.

Story text is generated through DSPy so the provider can be swapped:
- Gemini (GOOGLE_API_KEY) - same model family as the illustrations
- Claude (ANTHROPIC_API_KEY)
- GPT (OPENAI_API_KEY)

Includes a 120s timeout per LLM call. No retries: a failed call fails the
generation and the caller decides whether to try again.
"""

import os
import logging

from dotenv import load_dotenv
import dspy

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

# Timeout for LLM calls (seconds)
LLM_TIMEOUT = 120

# Default model per provider, in priority order
DEFAULT_TEXT_MODELS = {
    "GOOGLE_API_KEY": "gemini/gemini-2.5-flash",
    "ANTHROPIC_API_KEY": "anthropic/claude-sonnet-4-20250514",
    "OPENAI_API_KEY": "gpt-4o",
}


def _select_provider() -> tuple[str, str]:
    """Return (env var name, model id) for the first configured provider."""
    for env_var, model in DEFAULT_TEXT_MODELS.items():
        if os.getenv(env_var):
            return env_var, os.getenv("STORYBOOK_TEXT_MODEL", model)
    raise ValueError(
        "No API key found. Set GOOGLE_API_KEY, ANTHROPIC_API_KEY, or OPENAI_API_KEY in .env"
    )


def get_inference_lm() -> dspy.LM:
    """
    Get the inference LM for story text generation.

    Includes 120s timeout per call.
    """
    env_var, model = _select_provider()
    logger.debug(f"Using text model {model}")
    return dspy.LM(
        model,
        api_key=os.getenv(env_var),
        max_tokens=4096,
        temperature=1.0,
        timeout=LLM_TIMEOUT,
    )


def get_inference_model_name() -> str:
    """Get the name of the inference model that will be used."""
    try:
        return _select_provider()[1]
    except ValueError:
        return "unknown"
