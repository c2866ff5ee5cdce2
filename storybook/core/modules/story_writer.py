"""
DSPy Module that turns an outline prompt into raw story text.

The output is unstructured; storybook.core.page_parser reads the pages back.
"""

import logging

import dspy

from ..signatures.story_text import StoryTextSignature

logger = logging.getLogger(__name__)


class StoryWriter(dspy.Module):
    """
    Generate the full story text from one prompt.

    Args:
        lm: Optional explicit LM to use. If provided, bypasses global
            dspy.configure() state. Useful for testing and explicit control.
    """

    def __init__(self, lm: dspy.LM = None):
        super().__init__()
        self.generate = dspy.Predict(StoryTextSignature)
        self._lm = lm

    def forward(self, prompt: str) -> str:
        """
        Generate story text.

        Args:
            prompt: Complete outline prompt

        Returns:
            Raw story text as produced by the model
        """
        if self._lm is not None:
            with dspy.context(lm=self._lm):
                result = self.generate(prompt=prompt)
        else:
            result = self.generate(prompt=prompt)

        story = result.story or ""
        logger.debug(f"Generated {len(story)} characters of story text")
        return story
