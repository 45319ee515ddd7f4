"""
Caption text cleanup.
Captioning models store their output as JSON (or Python-dict-looking text);
the admin UI only wants the sentence inside.
"""
import json
import re
from typing import Optional

_CAPTION_KEYS = ("<MORE_DETAILED_CAPTION>", "caption", "description")

_WRAPPED_CAPTION_PATTERNS = [
    re.compile(r"""^\s*\{\s*['"`]?%s['"`]?\s*:\s*['"`]([^'"]*)['"`]\s*\}\s*$""" % re.escape(key))
    for key in _CAPTION_KEYS
]


def extract_caption_text(caption: Optional[str]) -> str:
    """
    Extract the readable text from a stored caption.

    Args:
        caption: Raw caption column value

    Returns:
        str: Caption text, or the original value when nothing better is found
    """
    if not caption:
        return ""

    try:
        parsed = json.loads(caption)
    except ValueError:
        cleaned = caption
        for pattern in _WRAPPED_CAPTION_PATTERNS:
            cleaned = pattern.sub(r"\1", cleaned)
        return cleaned

    if not isinstance(parsed, dict):
        return caption

    for key in _CAPTION_KEYS:
        if parsed.get(key):
            return parsed[key]

    for value in parsed.values():
        if isinstance(value, str):
            return value

    return caption
