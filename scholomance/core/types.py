"""Value types produced and consumed by the colour engine.

All of them are frozen: an enriched result is a new object built by
:func:`scholomance.core.merge.merge_enrichment`, never an in-place update.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from .tokenizer import Token

CHANNEL_SOURCES = ("school", "rune", "feel")
CHIP_TYPES = ("school", "rune", "feel")
EVIDENCE_TYPES = ("phoneme", "rhyme", "usage", "definition")
PROVENANCES = ("fast", "enriched")


@dataclass(frozen=True)
class Channel:
    source: str
    class_name: str

    def as_dict(self) -> Dict[str, Any]:
        return {"source": self.source, "class_name": self.class_name}


@dataclass(frozen=True)
class Channels:
    text: Channel
    accent: Channel
    border: Channel
    glow: Channel

    def as_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text.as_dict(),
            "accent": self.accent.as_dict(),
            "border": self.border.as_dict(),
            "glow": self.glow.as_dict(),
        }


@dataclass(frozen=True)
class Chip:
    type: str
    label: str
    class_name: str
    confidence: float
    source: str = "fast"

    @classmethod
    def coerce(cls, value: Any, default_source: str = "enriched") -> Optional["Chip"]:
        if isinstance(value, Chip):
            return value
        if not isinstance(value, Mapping):
            return None
        chip_type = value.get("type")
        if chip_type not in CHIP_TYPES:
            return None
        try:
            confidence = float(value.get("confidence", 0.0))
        except (TypeError, ValueError):
            confidence = 0.0
        source = value.get("source", default_source)
        return cls(
            type=chip_type,
            label=str(value.get("label", "")),
            class_name=str(value.get("class_name", value.get("className", ""))),
            confidence=confidence,
            source=source if source in PROVENANCES else default_source,
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "label": self.label,
            "class_name": self.class_name,
            "confidence": self.confidence,
            "source": self.source,
        }


@dataclass(frozen=True)
class Evidence:
    type: str
    value: str
    source: str = "fast"

    @classmethod
    def coerce(cls, value: Any, default_source: str = "enriched") -> Optional["Evidence"]:
        if isinstance(value, Evidence):
            return value
        if not isinstance(value, Mapping):
            return None
        evidence_type = value.get("type")
        if evidence_type not in EVIDENCE_TYPES:
            return None
        source = value.get("source", default_source)
        return cls(
            type=evidence_type,
            value=str(value.get("value", "")),
            source=source if source in PROVENANCES else default_source,
        )

    def as_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "value": self.value, "source": self.source}


@dataclass(frozen=True)
class SyntacticResult:
    """Classification of one normalised token."""

    engine_version: str
    token: str
    classes: Tuple[str, ...]
    channels: Channels
    chips: Tuple[Chip, ...] = ()
    evidence: Tuple[Evidence, ...] = ()
    confidence: float = 0.0
    enriched: bool = False

    def as_dict(self) -> Dict[str, Any]:
        return {
            "engine_version": self.engine_version,
            "token": self.token,
            "classes": list(self.classes),
            "channels": self.channels.as_dict(),
            "chips": [chip.as_dict() for chip in self.chips],
            "evidence": [item.as_dict() for item in self.evidence],
            "confidence": self.confidence,
            "enriched": self.enriched,
        }


@dataclass(frozen=True)
class EnrichmentPatch:
    """What a provider adds on top of a fast-pass result."""

    chips: Tuple[Chip, ...] = ()
    evidence: Tuple[Evidence, ...] = ()
    confidence_boost: float = 0.0
    enriched: Optional[bool] = None
    is_valid: Optional[bool] = None

    @classmethod
    def coerce(cls, value: Any) -> Optional["EnrichmentPatch"]:
        """Accept a patch instance or a mapping with camel or snake case keys."""

        if value is None or isinstance(value, EnrichmentPatch):
            return value
        if not isinstance(value, Mapping):
            return None

        def _pick(*names: str) -> Any:
            for name in names:
                if name in value:
                    return value[name]
            return None

        boost = _pick("confidence_boost", "confidenceBoost")
        try:
            confidence_boost = float(boost) if boost is not None else 0.0
        except (TypeError, ValueError):
            confidence_boost = 0.0
        if not math.isfinite(confidence_boost):
            confidence_boost = 0.0

        enriched = _pick("enriched")
        is_valid = _pick("is_valid", "isValid")
        return cls(
            chips=_coerce_all(Chip.coerce, value.get("chips")),
            evidence=_coerce_all(Evidence.coerce, value.get("evidence")),
            confidence_boost=confidence_boost,
            enriched=None if enriched is None else bool(enriched),
            is_valid=None if is_valid is None else bool(is_valid),
        )


def _coerce_all(coerce: Callable[[Any], Any], items: Optional[Iterable[Any]]) -> Tuple[Any, ...]:
    if not items or isinstance(items, (str, bytes, Mapping)):
        return ()
    coerced = (coerce(item) for item in items)
    return tuple(item for item in coerced if item is not None)


@dataclass(frozen=True)
class EnrichmentRecord:
    result: SyntacticResult
    updated_at: float
    signature: str
    is_valid: bool


@dataclass(frozen=True)
class Decoration:
    start: int
    end: int
    result: SyntacticResult


@dataclass(frozen=True)
class DecoratedText:
    tokens: List[Token] = field(default_factory=list)
    decorations: List[Decoration] = field(default_factory=list)


# Called as ``provider(token)``. Providers may also take an optional
# ``signal`` keyword; the scheduler never passes one.
EnrichmentProvider = Callable[..., Awaitable[Optional[Any]]]
EnrichmentFlag = Callable[[], bool]
ChangeCallback = Callable[[], None]


def get_evidence_value(result: Optional[SyntacticResult], evidence_type: str) -> Optional[str]:
    """First evidence value of ``evidence_type`` on ``result``, if any."""

    if result is None:
        return None
    for item in result.evidence:
        if item.type == evidence_type and item.value:
            return item.value
    return None


__all__ = [
    "CHANNEL_SOURCES",
    "CHIP_TYPES",
    "EVIDENCE_TYPES",
    "PROVENANCES",
    "Channel",
    "Channels",
    "Chip",
    "Evidence",
    "SyntacticResult",
    "EnrichmentPatch",
    "EnrichmentRecord",
    "Decoration",
    "DecoratedText",
    "EnrichmentProvider",
    "EnrichmentFlag",
    "ChangeCallback",
    "get_evidence_value",
]
