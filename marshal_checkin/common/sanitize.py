"""
Input sanitizing and validation helpers.

All user-supplied text (names, descriptions, imported CSV cells) passes
through these functions before it reaches storage.
"""

import re
from typing import Optional

MAX_NAME_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 2000
MAX_NOTES_LENGTH = 5000
MAX_EMAIL_LENGTH = 254
MAX_PHONE_LENGTH = 30
MAX_WHAT3WORDS_LENGTH = 50

_SCRIPT_RE = re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]*>")
_PHONE_STRIP_RE = re.compile(r"[^0-9\s\-\(\)\+]")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$", re.IGNORECASE)
_W3W_RE = re.compile(r"^[a-z]{1,20}[./][a-z]{1,20}[./][a-z]{1,20}$")

def sanitize_string(value: Optional[str], max_length: int = 1000) -> str:
    """
    Trim, remove HTML tags and script blocks, and truncate.

    Args:
        value: raw input, may be None
        max_length: maximum length of the result

    Returns:
        Sanitized string, empty for None or blank input
    """
    if value is None or not value.strip():
        return ""

    sanitized = _SCRIPT_RE.sub("", value)
    sanitized = _TAG_RE.sub("", sanitized).strip()

    return sanitized[:max_length]

def sanitize_name(name: Optional[str]) -> str:
    return sanitize_string(name, MAX_NAME_LENGTH)

def sanitize_description(description: Optional[str]) -> str:
    return sanitize_string(description, MAX_DESCRIPTION_LENGTH)

def sanitize_notes(notes: Optional[str]) -> str:
    return sanitize_string(notes, MAX_NOTES_LENGTH)

def sanitize_email(email: Optional[str]) -> Optional[str]:
    """Lower-cased email, or None when missing, too long or malformed."""
    if email is None or not email.strip():
        return None

    sanitized = email.strip().lower()
    if len(sanitized) > MAX_EMAIL_LENGTH:
        return None

    return sanitized if is_valid_email(sanitized) else None

def sanitize_phone(phone: Optional[str]) -> str:
    """Keep digits, spaces, dashes, parentheses and plus signs."""
    if phone is None or not phone.strip():
        return ""

    return _PHONE_STRIP_RE.sub("", phone).strip()[:MAX_PHONE_LENGTH]

def sanitize_what3words(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None

    sanitized = value.strip().lower()
    if len(sanitized) > MAX_WHAT3WORDS_LENGTH:
        return None

    return sanitized if is_valid_what3words(sanitized) else None

def is_valid_email(email: Optional[str]) -> bool:
    return bool(email) and _EMAIL_RE.match(email) is not None

def is_valid_what3words(value: Optional[str]) -> bool:
    """
    Validate a what3words address (``word.word.word`` or ``word/word/word``).

    Empty values are valid since the field is optional. Mixed separators
    are rejected.
    """
    if value is None or not value.strip():
        return True

    if not _W3W_RE.match(value):
        return False

    return ("." in value) != ("/" in value)
