"""Scholomance: layered colour, phonetic and tone annotation of text."""

from .core import (
    ENGINE_VERSION,
    ColorEngine,
    DecoratedText,
    Decoration,
    EnrichmentPatch,
    SyntacticResult,
    Token,
    get_evidence_value,
    tokenize,
)
from .config import EngineSettings

__version__ = "0.1.0"

__all__ = [
    "ENGINE_VERSION",
    "ColorEngine",
    "DecoratedText",
    "Decoration",
    "EngineSettings",
    "EnrichmentPatch",
    "SyntacticResult",
    "Token",
    "get_evidence_value",
    "tokenize",
]
