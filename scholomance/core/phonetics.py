"""Vowel-family analysis from ARPAbet phones or, failing that, from spelling."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Set, Tuple, runtime_checkable

VOWEL_PHONEMES: Set[str] = {
    "AA",
    "AE",
    "AH",
    "AO",
    "AW",
    "AY",
    "EH",
    "ER",
    "EY",
    "IH",
    "IY",
    "OW",
    "OY",
    "UH",
    "UW",
    "AX",
    "AXR",
    "IX",
    "UX",
}

# ARPAbet vowel -> vowel family. The family inventory is the one the
# colour schema knows about (see ``design_tokens.VOWEL_COLORS``).
ARPABET_TO_FAMILY: Dict[str, str] = {
    "AA": "A",
    "AE": "AE",
    "AH": "UH",
    "AO": "AO",
    "AW": "AW",
    "AY": "AY",
    "EH": "EH",
    "ER": "ER",
    "EY": "EY",
    "IH": "IH",
    "IY": "IY",
    "OW": "OW",
    "OY": "OY",
    "UH": "UH",
    "UW": "UW",
    "AX": "UH",
    "AXR": "ER",
    "IX": "IH",
    "UX": "UW",
}

# Spelled vowel run -> vowel family, used when no pronunciation is known.
SPELLING_TO_FAMILY: Dict[str, str] = {
    "A": "A",
    "E": "EH",
    "I": "IH",
    "O": "OH",
    "U": "UH",
    "AI": "AY",
    "AY": "AY",
    "EE": "IY",
    "EA": "IY",
    "OO": "UW",
    "OU": "AW",
    "OW": "OW",
    "OI": "OY",
    "OY": "OY",
}

FALLBACK_VOWEL_FAMILY = "UH"
DEFAULT_SPELLED_FAMILY = "A"

_DIGIT_PATTERN = re.compile(r"\d")
_SPELLED_VOWELS = re.compile(r"[AEIOU]+")
_SPELLED_CODA = re.compile(r"[^AEIOU]+$")
_NON_LETTERS = re.compile(r"[^A-Z]")


@dataclass(frozen=True)
class PhonemeAnalysis:
    """Dominant vowel family, phones and coda of one word."""

    vowel_family: str
    phonemes: Tuple[str, ...]
    coda: Optional[str]

    @property
    def rhyme_key(self) -> str:
        return f"{self.vowel_family}-{self.coda or 'open'}"


@runtime_checkable
class PhoneticDictionary(Protocol):
    """Anything that can turn a normalised word into a phoneme analysis."""

    def analyze_word(self, word: str) -> Optional[PhonemeAnalysis]:
        ...


def strip_stress(phone: str) -> str:
    return _DIGIT_PATTERN.sub("", phone or "").strip().upper()


def analyze_phones(phones: Iterable[str]) -> Optional[PhonemeAnalysis]:
    """Derive the vowel family and coda from an ARPAbet pronunciation.

    The family comes from the last vowel; the coda is every consonant after
    it, joined without separators (``N AY1 T`` -> ``AY`` / ``T``).
    """

    phone_list = [phone for phone in phones if isinstance(phone, str) and phone.strip()]
    if not phone_list:
        return None

    bare = [strip_stress(phone) for phone in phone_list]
    last_vowel_index: Optional[int] = None
    for index, phone in enumerate(bare):
        if phone in VOWEL_PHONEMES:
            last_vowel_index = index

    if last_vowel_index is None:
        return PhonemeAnalysis(
            vowel_family=FALLBACK_VOWEL_FAMILY,
            phonemes=tuple(phone_list),
            coda=None,
        )

    family = ARPABET_TO_FAMILY.get(bare[last_vowel_index], DEFAULT_SPELLED_FAMILY)
    coda = "".join(bare[last_vowel_index + 1 :]) or None
    return PhonemeAnalysis(vowel_family=family, phonemes=tuple(phone_list), coda=coda)


def guess_vowel_family(vowel_run: str) -> str:
    upper = (vowel_run or "").upper()
    if not upper:
        return DEFAULT_SPELLED_FAMILY
    return (
        SPELLING_TO_FAMILY.get(upper)
        or SPELLING_TO_FAMILY.get(upper[0])
        or DEFAULT_SPELLED_FAMILY
    )


def split_to_phonemes(letters: str) -> List[str]:
    """Very rough letter split: vowel pairs become one stressed nucleus."""

    phonemes: List[str] = []
    index = 0
    while index < len(letters):
        char = letters[index]
        if char in "AEIOU":
            following = letters[index + 1] if index + 1 < len(letters) else ""
            if following and following in "AEIOU":
                phonemes.append(f"{char}{following}1")
                index += 2
                continue
            phonemes.append(f"{char}1")
        else:
            phonemes.append(char)
        index += 1
    return phonemes


def analyze_spelling(word: str) -> Optional[PhonemeAnalysis]:
    """Heuristic analysis from letters alone; ``None`` for letterless input."""

    letters = _NON_LETTERS.sub("", (word or "").upper())
    if not letters:
        return None

    vowel_runs = _SPELLED_VOWELS.findall(letters)
    if not vowel_runs:
        return PhonemeAnalysis(
            vowel_family=FALLBACK_VOWEL_FAMILY,
            phonemes=tuple(letters),
            coda=None,
        )

    coda_match = _SPELLED_CODA.search(letters)
    return PhonemeAnalysis(
        vowel_family=guess_vowel_family(vowel_runs[-1]),
        phonemes=tuple(split_to_phonemes(letters)),
        coda=coda_match.group(0) if coda_match else None,
    )


def phones_from_text(pronunciation: str) -> Sequence[str]:
    return tuple(part for part in (pronunciation or "").split() if part)


__all__ = [
    "VOWEL_PHONEMES",
    "ARPABET_TO_FAMILY",
    "SPELLING_TO_FAMILY",
    "FALLBACK_VOWEL_FAMILY",
    "PhonemeAnalysis",
    "PhoneticDictionary",
    "analyze_phones",
    "analyze_spelling",
    "guess_vowel_family",
    "phones_from_text",
    "split_to_phonemes",
    "strip_stress",
]
