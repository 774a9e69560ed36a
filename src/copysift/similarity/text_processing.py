"""
Text Processing Utilities

Provides:
- Normalization (lowercase, punctuation stripping, whitespace collapsing)
- Character n-gram shingle generation
"""

import re
from typing import Set

DEFAULT_SHINGLE_SIZE = 3

# Anything that is neither a Unicode word character nor whitespace
_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize(text: str) -> str:
    """
    Normalize text for shingling.

    Example:
        "The QUICK, brown fox!" -> "the quick brown fox"
    """
    if not text:
        return ""
    text = text.lower()
    text = _PUNCTUATION.sub(" ", text)
    text = _WHITESPACE.sub(" ", text)
    return text.strip()


def shingles(text: str, n: int = DEFAULT_SHINGLE_SIZE) -> Set[str]:
    """
    Extract the set of ``n``-character shingles of the normalized text.

    Text shorter than ``n`` after normalization yields a single shingle
    holding the whole string, so even "" produces ``{""}``.

    Example:
        shingles("Fox!") -> {"fox"}
        shingles("hello") -> {"hel", "ell", "llo"}
    """
    if n < 1:
        raise ValueError(f"Shingle size must be positive, got {n}")

    processed = normalize(text)
    if len(processed) < n:
        return {processed}
    return {processed[i:i + n] for i in range(len(processed) - n + 1)}
