"""Synchronous baseline classification of a normalised token."""

from __future__ import annotations

from typing import List, Optional

from scholomance.utils.observability import get_logger

from .design_tokens import (
    FALLBACK_SCHOOL,
    feel_class,
    school_class,
    school_for_family,
    vowel_class,
)
from .feel import UNKNOWN_FEEL, classify_feel
from .phonetics import (
    FALLBACK_VOWEL_FAMILY,
    PhonemeAnalysis,
    PhoneticDictionary,
    analyze_spelling,
)
from .types import Channel, Channels, Chip, Evidence, SyntacticResult

ENGINE_VERSION = "color-engine@1"

HEURISTIC_CONFIDENCE = 0.4
DICTIONARY_CONFIDENCE = 0.75
EMPTY_CONFIDENCE = 0.0

logger = get_logger(__name__).bind(component="fast_pass")


def _lookup(token: str, dictionary: Optional[PhoneticDictionary]) -> Optional[PhonemeAnalysis]:
    if dictionary is None:
        return None
    try:
        analysis = dictionary.analyze_word(token)
    except Exception:
        # A broken dictionary degrades to the spelling heuristic.
        logger.debug(
            "Phonetic dictionary lookup failed",
            context={"token": token, "dictionary": type(dictionary).__name__},
            exc_info=True,
        )
        return None
    return analysis if isinstance(analysis, PhonemeAnalysis) else None


def _empty_result(token: str, version: str) -> SyntacticResult:
    school = school_class(FALLBACK_SCHOOL)
    channel = Channel(source="school", class_name=school)
    return SyntacticResult(
        engine_version=version,
        token=token,
        classes=(school, vowel_class(FALLBACK_VOWEL_FAMILY)),
        channels=Channels(text=channel, accent=channel, border=channel, glow=channel),
        chips=(
            Chip(
                type="school",
                label=FALLBACK_SCHOOL,
                class_name=school,
                confidence=EMPTY_CONFIDENCE,
                source="fast",
            ),
        ),
        evidence=(),
        confidence=EMPTY_CONFIDENCE,
        enriched=False,
    )


def classify(
    token: str,
    dictionary: Optional[PhoneticDictionary] = None,
    *,
    version: str = ENGINE_VERSION,
) -> SyntacticResult:
    """Classify ``token`` (already normalised) without touching any cache.

    Dictionary-backed analyses score :data:`DICTIONARY_CONFIDENCE`, spelling
    heuristics :data:`HEURISTIC_CONFIDENCE`. Input without letters gets a
    fixed low-confidence result in the fallback school.
    """

    if not isinstance(token, str):
        token = ""

    analysis = _lookup(token, dictionary)
    dictionary_backed = analysis is not None
    if analysis is None:
        analysis = analyze_spelling(token)
    if analysis is None:
        return _empty_result(token, version)

    confidence = DICTIONARY_CONFIDENCE if dictionary_backed else HEURISTIC_CONFIDENCE
    school = school_for_family(analysis.vowel_family)
    school_class_name = school_class(school)
    vowel_class_name = vowel_class(analysis.vowel_family)
    school_channel = Channel(source="school", class_name=school_class_name)

    feel = classify_feel(token)
    has_feel = feel != UNKNOWN_FEEL
    accent = Channel(source="feel", class_name=feel_class(feel)) if has_feel else school_channel

    chips: List[Chip] = [
        Chip(
            type="school",
            label=school,
            class_name=school_class_name,
            confidence=confidence,
            source="fast",
        )
    ]
    evidence: List[Evidence] = []

    if analysis.phonemes:
        count = len(analysis.phonemes)
        chips.append(
            Chip(
                type="rune",
                label=f"{count} phoneme{'s' if count != 1 else ''}",
                class_name=vowel_class_name,
                confidence=confidence,
                source="fast",
            )
        )
        evidence.append(Evidence(type="rhyme", value=analysis.rhyme_key, source="fast"))
        if dictionary_backed:
            evidence.append(
                Evidence(type="phoneme", value=" ".join(analysis.phonemes), source="fast")
            )

    if has_feel:
        chips.append(
            Chip(
                type="feel",
                label=feel,
                class_name=feel_class(feel),
                confidence=confidence,
                source="fast",
            )
        )

    return SyntacticResult(
        engine_version=version,
        token=token,
        classes=(school_class_name, vowel_class_name),
        channels=Channels(
            text=school_channel,
            accent=accent,
            border=school_channel,
            glow=school_channel,
        ),
        chips=tuple(chips),
        evidence=tuple(evidence),
        confidence=confidence,
        enriched=False,
    )


__all__ = [
    "ENGINE_VERSION",
    "HEURISTIC_CONFIDENCE",
    "DICTIONARY_CONFIDENCE",
    "EMPTY_CONFIDENCE",
    "classify",
]
