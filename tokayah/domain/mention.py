"""Mention detection — is a message addressed to Tok Ayah, and what is left.

Pure Python, no framework dependencies.
"""

import re
from typing import Optional, Pattern

# Colloquial name and the spelling variants people actually type
ALIAS_VARIANTS = (
    "tok ayah",
    "tokayah",
    "tok ayoh",
    "tokayoh",
    "tok aya",
    "tokaya",
    "tokayahh",
    "tok ayahh",
)

# Longest first so "tok ayahh" wins over "tok ayah"
_ALIAS_RE = re.compile(
    r"[,\s]*\b(?:"
    + "|".join(re.escape(a) for a in sorted(ALIAS_VARIANTS, key=len, reverse=True))
    + r")\b[,\s]*",
    re.IGNORECASE,
)
_SPACE_BEFORE_PUNCT_RE = re.compile(r"\s+([?!.,;:])")
_MULTI_SPACE_RE = re.compile(r"[ \t]{2,}")


def _handle_name(handle: Optional[str]) -> str:
    return (handle or "").strip().lstrip("@").lower()


def _handle_re(handle: str) -> Pattern:
    return re.compile(
        rf"[,\s]*(?<![\w@])@?{re.escape(handle)}\b[,\s]*",
        re.IGNORECASE,
    )


def is_addressed(text: str, handle: Optional[str] = None) -> bool:
    """True when text mentions the bot handle (with or without @) or an alias."""
    lowered = (text or "").lower()
    name = _handle_name(handle)
    if name and name in lowered:
        return True
    return any(alias in lowered for alias in ALIAS_VARIANTS)


def strip_address(text: str, handle: Optional[str] = None) -> str:
    """Remove handle/alias occurrences on word boundaries and return the residual."""
    cleaned = text or ""
    name = _handle_name(handle)
    if name:
        cleaned = _handle_re(name).sub(" ", cleaned)
    cleaned = _ALIAS_RE.sub(" ", cleaned)
    cleaned = _SPACE_BEFORE_PUNCT_RE.sub(r"\1", cleaned)
    cleaned = _MULTI_SPACE_RE.sub(" ", cleaned)
    return cleaned.strip().strip(",").strip()


class MentionDetector:
    """Binds the bot's resolved handle to the detection functions."""

    def __init__(self, handle: Optional[str] = None):
        self.handle = _handle_name(handle)

    def is_addressed(self, text: str) -> bool:
        return is_addressed(text, self.handle)

    def strip_address(self, text: str) -> str:
        return strip_address(text, self.handle)
