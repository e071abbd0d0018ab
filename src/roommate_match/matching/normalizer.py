"""Text normalization for survey value lookup."""

import re
import unicodedata

# Pre-compiled regex patterns for performance
_PUNCTUATION_RE = re.compile(r"[/\-_׳״'\"]")
_NON_WORD_RE = re.compile(r"[^\w\s]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(text: str | None) -> str:
    """Normalize free text so survey values can be looked up in alias tables.

    Algorithm:
    1. Convert to lowercase
    2. Normalize Unicode (NFKD form)
    3. Strip combining marks (Latin diacritics, Hebrew niqqud)
    4. Turn separators (slash, dash, underscore, geresh, quotes) into spaces
    5. Remove remaining punctuation (Unicode word characters are kept)
    6. Collapse whitespace to single spaces
    7. Strip leading/trailing whitespace

    Args:
        text: Input text to normalize.

    Returns:
        Normalized text, empty for empty input.

    Examples:
        >>> normalize_text("  No   Problem ")
        'no problem'
        >>> normalize_text("מעדיפ/ה שלא")
        'מעדיפ ה שלא'
        >>> normalize_text("kosher_only")
        'kosher only'
        >>> normalize_text("Café")
        'cafe'
    """
    if not text:
        return ""

    result = text.lower()
    result = unicodedata.normalize("NFKD", result)
    result = "".join(c for c in result if not unicodedata.combining(c))
    result = _PUNCTUATION_RE.sub(" ", result)
    result = _NON_WORD_RE.sub("", result)
    result = _WHITESPACE_RE.sub(" ", result)
    return result.strip()
