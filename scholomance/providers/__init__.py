"""Enrichment providers for :class:`scholomance.core.engine.ColorEngine`."""

from .dictionary_api import DictionaryApiProvider, build_patch

__all__ = ["DictionaryApiProvider", "build_patch"]
