"""Enrichment provider backed by a public dictionary REST API.

The API answers ``GET {base_url}/{word}`` with a JSON list of entries, each
carrying ``phonetic``/``phonetics`` text and ``meanings`` grouped by part of
speech. The provider turns the first entries into definition, usage and
phoneme evidence plus one rune chip per part of speech.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import quote

import httpx

from scholomance.config import EngineSettings
from scholomance.core.types import Chip, EnrichmentPatch, Evidence
from scholomance.utils.observability import get_logger

MAX_DEFINITIONS = 2
MAX_EXAMPLES = 1
MAX_PART_OF_SPEECH_CHIPS = 2
DEFINITION_CONFIDENCE_BOOST = 0.15
CHIP_CONFIDENCE = 0.6


class DictionaryApiProvider:
    """Async callable ``(token, *, signal=None) -> EnrichmentPatch | None``.

    A 404 means the word is unknown and yields ``None``. Any other HTTP or
    transport error is raised; the scheduler contains it.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None
        self._logger = get_logger(__name__).bind(component="dictionary_api")

    @classmethod
    def from_settings(cls, settings: EngineSettings) -> "DictionaryApiProvider":
        return cls(settings.dictionary_api_url, timeout=settings.dictionary_api_timeout)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None

    async def __call__(
        self, token: str, *, signal: Optional[asyncio.Event] = None
    ) -> Optional[EnrichmentPatch]:
        word = (token or "").strip()
        if not word:
            return None
        # A set signal means the caller no longer wants the result.
        if signal is not None and signal.is_set():
            return None

        url = f"{self.base_url}/{quote(word)}"
        response = await self._get_client().get(url)
        if response.status_code == 404:
            self._logger.debug("Word not found", context={"token": word})
            return None
        response.raise_for_status()
        return build_patch(response.json())


def _entries(payload: Any) -> List[Dict[str, Any]]:
    if isinstance(payload, dict):
        payload = [payload]
    if not isinstance(payload, list):
        return []
    return [entry for entry in payload if isinstance(entry, dict)]


def _phonetic_text(entry: Dict[str, Any]) -> Optional[str]:
    text = entry.get("phonetic")
    if isinstance(text, str) and text.strip():
        return text.strip()
    for item in entry.get("phonetics") or ():
        if isinstance(item, dict):
            candidate = item.get("text")
            if isinstance(candidate, str) and candidate.strip():
                return candidate.strip()
    return None


def _meanings(entries: Iterable[Dict[str, Any]]) -> Iterable[Dict[str, Any]]:
    for entry in entries:
        for meaning in entry.get("meanings") or ():
            if isinstance(meaning, dict):
                yield meaning


def build_patch(payload: Any) -> Optional[EnrichmentPatch]:
    """Map a dictionary API response body onto an enrichment patch."""

    entries = _entries(payload)
    if not entries:
        return None

    definitions: List[str] = []
    examples: List[str] = []
    parts_of_speech: List[str] = []

    for meaning in _meanings(entries):
        part = meaning.get("partOfSpeech")
        if isinstance(part, str) and part and part not in parts_of_speech:
            parts_of_speech.append(part)
        for definition in meaning.get("definitions") or ():
            if not isinstance(definition, dict):
                continue
            text = definition.get("definition")
            if isinstance(text, str) and text.strip() and len(definitions) < MAX_DEFINITIONS:
                definitions.append(text.strip())
            example = definition.get("example")
            if isinstance(example, str) and example.strip() and len(examples) < MAX_EXAMPLES:
                examples.append(example.strip())

    evidence: List[Evidence] = [
        Evidence(type="definition", value=text, source="enriched") for text in definitions
    ]
    evidence.extend(Evidence(type="usage", value=text, source="enriched") for text in examples)
    phonetic = next((text for text in map(_phonetic_text, entries) if text), None)
    if phonetic:
        evidence.append(Evidence(type="phoneme", value=phonetic, source="enriched"))

    chips = tuple(
        Chip(
            type="rune",
            label=part,
            class_name=f"rune-{part.lower().replace(' ', '-')}",
            confidence=CHIP_CONFIDENCE,
            source="enriched",
        )
        for part in parts_of_speech[:MAX_PART_OF_SPEECH_CHIPS]
    )

    return EnrichmentPatch(
        chips=chips,
        evidence=tuple(evidence),
        confidence_boost=DEFINITION_CONFIDENCE_BOOST if definitions else 0.0,
        enriched=True,
        is_valid=bool(definitions),
    )


__all__ = ["DictionaryApiProvider", "build_patch"]
