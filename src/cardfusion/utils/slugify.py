"""
URL slug generation for published card pages.

Lower-cases the input and collapses every run of characters outside
``[a-z0-9]`` into a single separator.
"""

import re
from typing import Optional

# Anything that is not a lowercase ASCII letter or digit, after lowercasing
UNSAFE_CHARS_PATTERN = re.compile(r"[^a-z0-9]+")

DEFAULT_MAX_LENGTH = 64


def slugify(text: Optional[str], replacement: str = "-", max_length: Optional[int] = DEFAULT_MAX_LENGTH) -> str:
    """
    Convert a string to a URL slug.

    Args:
        text: Input string to slugify
        replacement: Separator used for runs of unsafe characters (default: '-')
        max_length: Maximum length of result (default: 64, None for unlimited)

    Returns:
        Slug, or an empty string when nothing usable remains

    Examples:
        >>> slugify("Hello World!")
        'hello-world'

        >>> slugify("  Ünïcode -- Drop #3 ")
        'n-code-drop-3'

        >>> slugify("")
        ''
    """
    if not text or not text.strip():
        return ""

    result = UNSAFE_CHARS_PATTERN.sub(replacement, text.strip().lower())
    result = result.strip(replacement)

    if max_length and len(result) > max_length:
        result = result[:max_length].rstrip(replacement)

    return result
