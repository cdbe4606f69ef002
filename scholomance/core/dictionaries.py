"""In-process phonetic dictionaries."""

from __future__ import annotations

from typing import Dict, Iterable, Mapping, Optional, Tuple, Union

import pronouncing

from .phonetics import PhonemeAnalysis, analyze_phones, phones_from_text

PhoneSpec = Union[str, Iterable[str]]


class PronouncingDictionary:
    """Phonetic dictionary backed by the :mod:`pronouncing` CMU data."""

    def __init__(self) -> None:
        self._cache: Dict[str, Optional[PhonemeAnalysis]] = {}

    def analyze_word(self, word: str) -> Optional[PhonemeAnalysis]:
        if not isinstance(word, str):
            return None
        key = word.strip().lower()
        if not key:
            return None
        if key in self._cache:
            return self._cache[key]

        pronunciations = pronouncing.phones_for_word(key)
        analysis = analyze_phones(phones_from_text(pronunciations[0])) if pronunciations else None
        self._cache[key] = analysis
        return analysis


class PhonemeTableDictionary:
    """Dictionary over an explicit ``word -> phones`` table.

    Phones may be given as a space separated ARPAbet string or a sequence of
    symbols. Words are matched case-insensitively.
    """

    def __init__(self, table: Optional[Mapping[str, PhoneSpec]] = None) -> None:
        self._phones: Dict[str, Tuple[str, ...]] = {}
        for word, phones in (table or {}).items():
            self.add(word, phones)

    def add(self, word: str, phones: PhoneSpec) -> None:
        key = str(word or "").strip().lower()
        if not key:
            return
        if isinstance(phones, str):
            parsed = tuple(phones_from_text(phones))
        else:
            parsed = tuple(str(phone) for phone in phones if phone)
        if parsed:
            self._phones[key] = parsed

    def __len__(self) -> int:
        return len(self._phones)

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and word.strip().lower() in self._phones

    def analyze_word(self, word: str) -> Optional[PhonemeAnalysis]:
        if not isinstance(word, str):
            return None
        phones = self._phones.get(word.strip().lower())
        return analyze_phones(phones) if phones else None


__all__ = ["PronouncingDictionary", "PhonemeTableDictionary"]
