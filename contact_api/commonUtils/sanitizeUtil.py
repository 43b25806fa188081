"""
Free-text sanitization for values that end up inside the notification email.
"""
import re
from typing import Any

import bleach

NAME_MAX_LENGTH = 200
EMAIL_MAX_LENGTH = 200
MESSAGE_MAX_LENGTH = 5000

# No markup survives, only text content
_ALLOWED_TAGS: frozenset = frozenset()
_ALLOWED_ATTRIBUTES: dict = {}

# An escaped entity chopped off by truncation, e.g. "&am"
_PARTIAL_ENTITY = re.compile(r"&[#0-9A-Za-z]*$")


def sanitize(value: Any, max_length: int = MESSAGE_MAX_LENGTH) -> str:
    """
    Trim, strip all HTML and truncate a raw field value.

    Args:
        value: Raw value from the request body, may be None or a non-string scalar
        max_length: Upper bound on the returned string length

    Returns:
        Entity-escaped text that is safe to embed in HTML, "" for empty input
    """
    if value is None:
        return ""

    cleaned = bleach.clean(
        str(value).strip(),
        tags=_ALLOWED_TAGS,
        attributes=_ALLOWED_ATTRIBUTES,
        strip=True,
        strip_comments=True,
    ).strip()

    if len(cleaned) <= max_length:
        return cleaned

    return _PARTIAL_ENTITY.sub("", cleaned[:max_length])
