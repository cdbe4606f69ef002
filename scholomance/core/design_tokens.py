"""Colour design tokens, CSS class schema and the vowel -> school table.

Downstream consumers (text renderers, the world generator) read colours
from here; the classifier reads class names and the school table.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Tuple

RGB = Tuple[int, int, int]

SCHOOLS: Tuple[str, ...] = ("VOID", "PSYCHIC", "ALCHEMY", "WILL", "SONIC")
FALLBACK_SCHOOL = "VOID"

SCHOOL_NAMES: Dict[str, str] = {
    "SONIC": "Sonic Thaumaturgy",
    "PSYCHIC": "Psychic Schism",
    "VOID": "The Void",
    "ALCHEMY": "Verbal Alchemy",
    "WILL": "Willpower Surge",
}

# Many-to-one; families missing here fall back to VOID.
VOWEL_TO_SCHOOL: Dict[str, str] = {
    "A": "WILL",
    "AE": "WILL",
    "EH": "WILL",
    "IH": "PSYCHIC",
    "IY": "PSYCHIC",
    "EY": "PSYCHIC",
    "AY": "ALCHEMY",
    "OY": "ALCHEMY",
    "AW": "ALCHEMY",
    "AO": "SONIC",
    "OH": "SONIC",
    "OW": "SONIC",
    "UW": "SONIC",
    "UH": "VOID",
    "ER": "VOID",
}

SCHOOL_COLORS: Dict[str, RGB] = {
    "SONIC": (101, 31, 255),
    "PSYCHIC": (0, 229, 255),
    "VOID": (161, 161, 170),
    "ALCHEMY": (213, 0, 249),
    "WILL": (255, 138, 0),
}

FEEL_COLORS: Dict[str, RGB] = {
    "Unknown": (154, 160, 166),
    "Neutral": (154, 160, 166),
    "Joy": (255, 209, 102),
    "Sorrow": (91, 124, 250),
    "Rage": (255, 93, 93),
    "Fear": (111, 207, 151),
    "Awe": (90, 208, 194),
    "Desire": (255, 111, 177),
}

VOWEL_COLORS: Dict[str, RGB] = {
    "A": (255, 23, 68),
    "AE": (255, 138, 0),
    "AO": (101, 31, 255),
    "AW": (0, 230, 118),
    "AY": (0, 229, 255),
    "EH": (0, 176, 255),
    "ER": (118, 255, 3),
    "EY": (213, 0, 249),
    "IH": (41, 121, 255),
    "IY": (24, 255, 255),
    "OH": (255, 87, 34),
    "OW": (245, 0, 87),
    "OY": (255, 109, 0),
    "UH": (0, 200, 83),
    "UW": (100, 255, 218),
}

COLOR_SCHEMA: Dict[str, Dict[str, Dict[str, str]]] = {
    "classes": {
        "school": {school: f"school-{school.lower()}" for school in SCHOOLS},
        "vowel_family": {family: f"vowel-{family.lower()}" for family in VOWEL_COLORS},
        "feel": {feel: f"feel-{feel.lower()}" for feel in FEEL_COLORS},
    },
    "css_variables": {
        "schools": {school: f"--{school.lower()}" for school in SCHOOLS},
        "vowels": {family: f"--vowel-{family}" for family in VOWEL_COLORS},
        # Unknown shares the neutral swatch.
        "feels": {
            feel: "--feel-neutral" if feel == "Unknown" else f"--feel-{feel.lower()}"
            for feel in FEEL_COLORS
        },
    },
}


def school_for_family(vowel_family: Optional[str]) -> str:
    return VOWEL_TO_SCHOOL.get(vowel_family or "", FALLBACK_SCHOOL)


def school_class(school: str) -> str:
    return COLOR_SCHEMA["classes"]["school"].get(school, f"school-{str(school).lower()}")


def vowel_class(vowel_family: str) -> str:
    return COLOR_SCHEMA["classes"]["vowel_family"].get(
        vowel_family, f"vowel-{str(vowel_family).lower()}"
    )


def feel_class(feel: str) -> str:
    return COLOR_SCHEMA["classes"]["feel"].get(feel, "feel-unknown")


def blend_school_color(weights: Mapping[str, float]) -> RGB:
    """Weighted mean of school colours.

    Unknown schools and non-positive weights are ignored. When nothing is
    left the fallback school's colour is returned.
    """

    total = 0.0
    channels = [0.0, 0.0, 0.0]
    for school, weight in (weights or {}).items():
        color = SCHOOL_COLORS.get(school)
        try:
            value = float(weight)
        except (TypeError, ValueError):
            continue
        if color is None or value <= 0:
            continue
        total += value
        for index in range(3):
            channels[index] += color[index] * value

    if total <= 0:
        return SCHOOL_COLORS[FALLBACK_SCHOOL]
    return (
        int(round(channels[0] / total)),
        int(round(channels[1] / total)),
        int(round(channels[2] / total)),
    )


__all__ = [
    "RGB",
    "SCHOOLS",
    "FALLBACK_SCHOOL",
    "SCHOOL_NAMES",
    "VOWEL_TO_SCHOOL",
    "SCHOOL_COLORS",
    "FEEL_COLORS",
    "VOWEL_COLORS",
    "COLOR_SCHEMA",
    "school_for_family",
    "school_class",
    "vowel_class",
    "feel_class",
    "blend_school_color",
]
