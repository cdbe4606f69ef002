"""Phonetic dictionary backed by a CMU pronouncing dictionary file."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from scholomance.utils.observability import get_logger

from .phonetics import PhonemeAnalysis, analyze_phones

_WORD_VARIANT_PATTERN = re.compile(r"\(\d+\)$")
_CURLY_APOSTROPHES = re.compile(r"[\u2018\u2019]")

DEFAULT_DICT_FILENAME = "cmudict.7b"


def _strip_variant(word: str) -> str:
    return _WORD_VARIANT_PATTERN.sub("", word).lower()


class CMUDictLoader:
    """Lazy loader for the CMU pronouncing dictionary.

    Only the first pronunciation of each word is kept. A missing or
    unreadable file leaves the loader empty, and the next lookup tries again
    so a dictionary downloaded after start-up is picked up.
    """

    def __init__(self, dict_path: Optional[Path | str] = None) -> None:
        if dict_path is not None:
            base_path = Path(dict_path)
        else:
            module_path = Path(__file__).resolve()
            candidates = [
                module_path.with_name(DEFAULT_DICT_FILENAME),
                module_path.parents[1] / DEFAULT_DICT_FILENAME,
                module_path.parents[2] / DEFAULT_DICT_FILENAME,
            ]
            base_path = candidates[0]
            for candidate in candidates[1:]:
                try:
                    if candidate.exists():
                        base_path = candidate
                        break
                except OSError:
                    continue
        self.dict_path: Path = base_path
        self._pronunciations: Dict[str, Tuple[str, ...]] = {}
        self._analysis_cache: Dict[str, Optional[PhonemeAnalysis]] = {}
        self._loaded: bool = False
        self._logger = get_logger(__name__).bind(component="cmudict_loader")

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return

        if not self.dict_path.exists():
            return

        pronunciations: Dict[str, Tuple[str, ...]] = {}
        try:
            # The upstream 0.7b file is latin-1; newer releases are utf-8.
            with self.dict_path.open("r", encoding="utf-8", errors="replace") as handle:
                for line in handle:
                    entry = line.strip()
                    if not entry or entry.startswith(";;;"):
                        continue

                    parts = entry.split()
                    if len(parts) < 2:
                        continue

                    raw_word, *phones = parts
                    word = _strip_variant(raw_word)
                    if not word or word in pronunciations:
                        continue
                    pronunciations[word] = tuple(phones)
        except OSError as error:
            self._logger.warning(
                "CMU dictionary could not be read",
                context={"path": str(self.dict_path), "error": str(error)},
            )
            return

        self._pronunciations = pronunciations
        self._analysis_cache.clear()
        self._loaded = True
        self._logger.info(
            "CMU dictionary loaded",
            context={"path": str(self.dict_path), "entries": len(pronunciations)},
        )

    def __len__(self) -> int:
        self._ensure_loaded()
        return len(self._pronunciations)

    def __contains__(self, word: object) -> bool:
        if not isinstance(word, str):
            return False
        self._ensure_loaded()
        return self._key(word) in self._pronunciations

    @staticmethod
    def _key(word: str) -> str:
        return _CURLY_APOSTROPHES.sub("'", word.strip().lower())

    def get_pronunciation(self, word: str) -> List[str]:
        self._ensure_loaded()
        return list(self._pronunciations.get(self._key(word), ()))

    def analyze_word(self, word: str) -> Optional[PhonemeAnalysis]:
        if not isinstance(word, str) or not word.strip():
            return None
        self._ensure_loaded()
        key = self._key(word)
        if key in self._analysis_cache:
            return self._analysis_cache[key]
        phones = self._pronunciations.get(key)
        analysis = analyze_phones(phones) if phones else None
        if self._loaded:
            self._analysis_cache[key] = analysis
        return analysis


__all__ = ["CMUDictLoader", "DEFAULT_DICT_FILENAME"]
