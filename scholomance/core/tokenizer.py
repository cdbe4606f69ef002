"""Split raw text into word tokens with source offsets."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, List

# Word tokens are maximal runs of letters and apostrophes (straight or curly).
TOKEN_PATTERN = re.compile(r"[A-Za-z'\u2018\u2019]+")
_CURLY_APOSTROPHES = re.compile(r"[\u2018\u2019]")
_NON_WORD_CHARACTERS = re.compile(r"[^a-z']")


@dataclass(frozen=True)
class Token:
    """A word span of the source text; ``text[start:end] == raw``."""

    start: int
    end: int
    raw: str
    normalized: str


def normalize_token(value: Any) -> str:
    """Fold case and apostrophes and drop everything but letters and ``'``.

    ``"Night"``, ``"NIGHT!!"`` and ``"night"`` all normalise to ``"night"``.
    Non-string input normalises to the empty string.
    """

    if not isinstance(value, str) or not value:
        return ""
    folded = _CURLY_APOSTROPHES.sub("'", value.lower())
    return _NON_WORD_CHARACTERS.sub("", folded)


def tokenize(text: Any) -> List[Token]:
    """Return every word token in ``text`` in source order."""

    if not isinstance(text, str) or not text:
        return []
    return [
        Token(
            start=match.start(),
            end=match.end(),
            raw=match.group(0),
            normalized=normalize_token(match.group(0)),
        )
        for match in TOKEN_PATTERN.finditer(text)
    ]


__all__ = ["Token", "TOKEN_PATTERN", "normalize_token", "tokenize"]
