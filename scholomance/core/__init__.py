"""Token decoration and enrichment engine."""

from .cache import EngineCache, KeyedStore, cache_key
from .cmudict_loader import CMUDictLoader
from .design_tokens import (
    COLOR_SCHEMA,
    FEEL_COLORS,
    SCHOOL_COLORS,
    SCHOOLS,
    VOWEL_COLORS,
    VOWEL_TO_SCHOOL,
    blend_school_color,
)
from .dictionaries import PhonemeTableDictionary, PronouncingDictionary
from .engine import ColorEngine
from .fast_pass import ENGINE_VERSION, classify
from .feel import FEELS, classify_feel
from .merge import build_signature, merge_enrichment
from .phonetics import PhonemeAnalysis, PhoneticDictionary, analyze_phones, analyze_spelling
from .scheduler import ChangeNotifier, EnrichmentScheduler
from .tokenizer import Token, normalize_token, tokenize
from .types import (
    Channel,
    Channels,
    Chip,
    DecoratedText,
    Decoration,
    EnrichmentPatch,
    EnrichmentRecord,
    Evidence,
    SyntacticResult,
    get_evidence_value,
)

__all__ = [
    "ENGINE_VERSION",
    "ColorEngine",
    "EnrichmentScheduler",
    "ChangeNotifier",
    "EngineCache",
    "KeyedStore",
    "cache_key",
    "CMUDictLoader",
    "PronouncingDictionary",
    "PhonemeTableDictionary",
    "PhonemeAnalysis",
    "PhoneticDictionary",
    "analyze_phones",
    "analyze_spelling",
    "classify",
    "classify_feel",
    "FEELS",
    "merge_enrichment",
    "build_signature",
    "Token",
    "normalize_token",
    "tokenize",
    "Channel",
    "Channels",
    "Chip",
    "Evidence",
    "SyntacticResult",
    "EnrichmentPatch",
    "EnrichmentRecord",
    "Decoration",
    "DecoratedText",
    "get_evidence_value",
    "SCHOOLS",
    "SCHOOL_COLORS",
    "FEEL_COLORS",
    "VOWEL_COLORS",
    "VOWEL_TO_SCHOOL",
    "COLOR_SCHEMA",
    "blend_school_color",
]
