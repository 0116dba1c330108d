"""Text sanitization utilities."""

import re

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b-\x1f\x7f-\x9f]")
_WHITESPACE_RUN = re.compile(r"\s+")


def sanitize_text(text: str | None, max_length: int = 500) -> str | None:
    """
    Sanitize untrusted free text (trade intents, provider briefs).

    Removes control characters, collapses whitespace runs (including
    newlines and tabs) to single spaces, and truncates to max_length.

    Args:
        text: Text to sanitize (may be None)
        max_length: Maximum length before truncation

    Returns:
        Sanitized text or None if input was None
    """
    if text is None:
        return None

    text = _CONTROL_CHARS.sub("", text)
    text = _WHITESPACE_RUN.sub(" ", text).strip()

    if len(text) > max_length:
        text = text[:max_length].rstrip() + "..."

    return text
