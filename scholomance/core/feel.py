"""Lexicon-based emotional tone ("feel") of a single word."""

from __future__ import annotations

from typing import Dict, FrozenSet, Tuple

FEELS: Tuple[str, ...] = (
    "Unknown",
    "Neutral",
    "Joy",
    "Sorrow",
    "Rage",
    "Fear",
    "Awe",
    "Desire",
)

UNKNOWN_FEEL = "Unknown"

_FEEL_LEXICON: Dict[str, FrozenSet[str]] = {
    "Joy": frozenset(
        {
            "joy", "joyful", "happy", "happiness", "glad", "delight", "bright",
            "laugh", "laughter", "smile", "sun", "sunlight", "dance", "cheer",
            "bliss", "merry", "sing", "song", "shine", "golden", "gleam",
        }
    ),
    "Sorrow": frozenset(
        {
            "sad", "sorrow", "grief", "grieve", "mourn", "weep", "tears", "tear",
            "lost", "loss", "alone", "lonely", "ache", "broken", "regret",
            "gone", "farewell", "ashes", "hollow", "pale", "dirge",
        }
    ),
    "Rage": frozenset(
        {
            "rage", "fury", "furious", "anger", "angry", "wrath", "hate", "burn",
            "blaze", "fire", "storm", "scream", "roar", "strike", "fist",
            "blood", "war", "smash", "venom", "seethe",
        }
    ),
    "Fear": frozenset(
        {
            "fear", "afraid", "dread", "terror", "horror", "panic", "dark",
            "darkness", "shadow", "shadows", "night", "haunt", "haunted",
            "tremble", "shiver", "creep", "grave", "ghost", "omen", "abyss",
        }
    ),
    "Awe": frozenset(
        {
            "awe", "wonder", "vast", "infinite", "eternal", "divine", "sublime",
            "star", "stars", "cosmos", "heaven", "heavens", "mountain", "ocean",
            "sky", "endless", "ancient", "majesty", "radiant", "miracle",
        }
    ),
    "Desire": frozenset(
        {
            "desire", "want", "crave", "yearn", "long", "longing", "love",
            "lust", "kiss", "hunger", "thirst", "ache", "need", "embrace",
            "touch", "tempt", "sweet", "honey", "velvet", "ember",
        }
    ),
    "Neutral": frozenset(
        {
            "a", "an", "the", "and", "or", "but", "of", "to", "in", "on", "at",
            "by", "for", "with", "from", "is", "are", "was", "were", "be", "it",
            "this", "that", "as", "i", "you", "he", "she", "we", "they",
        }
    ),
}

# First listed feel wins when a word appears in several lexicons.
_FEEL_INDEX: Dict[str, str] = {}
for _feel in ("Joy", "Sorrow", "Rage", "Fear", "Awe", "Desire", "Neutral"):
    for _word in _FEEL_LEXICON[_feel]:
        _FEEL_INDEX.setdefault(_word, _feel)


def classify_feel(token: str) -> str:
    """Return the feel of a normalised token, ``"Unknown"`` when unlisted."""

    if not isinstance(token, str) or not token:
        return UNKNOWN_FEEL
    return _FEEL_INDEX.get(token.lower(), UNKNOWN_FEEL)


__all__ = ["FEELS", "UNKNOWN_FEEL", "classify_feel"]
