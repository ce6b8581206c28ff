"""Transcript normalization shared by disfluency detection and alignment."""
import re
from typing import List

# anything that is not a word character, whitespace or an apostrophe
_STRIP_PUNCT = re.compile(r"[^\w\s']", flags=re.UNICODE)


def normalize_text(text: str) -> str:
    return _STRIP_PUNCT.sub(" ", text).lower()


def tokenize(text: str) -> List[str]:
    """
    Lowercase, replace punctuation (except apostrophes) with spaces and
    split on whitespace.

    Example: "The quick, brown fox." -> ["the", "quick", "brown", "fox"]
    """
    if not text:
        return []
    return normalize_text(text).split()
