"""Combine fast-pass results with enrichment patches."""

from __future__ import annotations

import hashlib
import json
import math
from dataclasses import replace
from typing import Optional

from .types import EnrichmentPatch, SyntacticResult


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def _boost(value: object) -> float:
    try:
        boost = float(value or 0.0)
    except (TypeError, ValueError):
        return 0.0
    return boost if math.isfinite(boost) else 0.0


def merge_enrichment(
    baseline: SyntacticResult,
    patch: Optional[EnrichmentPatch],
) -> SyntacticResult:
    """Return ``baseline`` with ``patch`` appended on top.

    Patch chips and evidence go after the baseline ones. The confidence
    boost is added and clamped to ``[0, 1]``; a non-finite boost counts as
    zero. ``enriched`` becomes the patch's value (``True`` when the patch
    leaves it unset). A ``None`` patch returns ``baseline`` itself.
    """

    if patch is None:
        return baseline

    return replace(
        baseline,
        chips=baseline.chips + tuple(patch.chips),
        evidence=baseline.evidence + tuple(patch.evidence),
        confidence=_clamp(baseline.confidence + _boost(patch.confidence_boost)),
        enriched=True if patch.enriched is None else bool(patch.enriched),
    )


def build_signature(result: SyntacticResult) -> str:
    """Deterministic digest of every observable field of ``result``."""

    payload = json.dumps(result.as_dict(), sort_keys=True, separators=(",", ":"))
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()


__all__ = ["merge_enrichment", "build_signature"]
