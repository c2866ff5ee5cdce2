"""
DSPy Signature for writing the complete paginated story text.

The instruction itself (theme, cast, age guidance and the [PAGE n] format)
is built by storybook.core.prompts and passed in whole.
"""

import dspy


class StoryTextSignature(dspy.Signature):
    """
    Write a children's picture book story following the instructions exactly.

    Keep every page in the requested tagged format so the pages can be
    read back one by one.
    """

    prompt: str = dspy.InputField(
        desc="Story requirements and the exact page format to follow"
    )

    story: str = dspy.OutputField(
        desc="""The complete story, every page in the requested format:
[PAGE n]
Text: [story text]
Illustration: [scene description]"""
    )
