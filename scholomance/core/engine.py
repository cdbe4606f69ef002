"""Public colour engine: decorate text now, enrich it in the background."""

from __future__ import annotations

import asyncio
from typing import List, Optional

from scholomance.config import EngineSettings
from scholomance.providers.dictionary_api import DictionaryApiProvider
from scholomance.utils.observability import get_logger

from .cache import EngineCache, cache_key
from .fast_pass import ENGINE_VERSION, classify
from .phonetics import PhoneticDictionary
from .scheduler import EnrichmentScheduler
from .tokenizer import normalize_token, tokenize
from .types import (
    ChangeCallback,
    DecoratedText,
    Decoration,
    EnrichmentFlag,
    EnrichmentProvider,
    EnrichmentRecord,
    SyntacticResult,
)


class ColorEngine:
    """Token decoration with a synchronous fast pass and async enrichment.

    Every instance owns its caches and scheduler, so several engines can
    live side by side and each one tears down on its own. Nothing on the
    public surface raises: failures fall back to the fast-pass result.

    Args:
        phoneme_engine: Optional phonetic dictionary used by the fast pass.
        on_enriched: Called (at most once per loop tick) after enrichment
            records change. Consumers re-pull results rather than receive
            a payload.
        enrichment_provider: ``async (token) -> patch | None``. Defaults to
            the public dictionary API provider.
        is_enrichment_enabled: Zero-argument flag checked before queueing
            and before every pump. Defaults to
            ``settings.dictionary_api_enabled``.
        concurrency: Maximum provider calls in flight.
        enrichment_delay: Seconds between pump cycles.
        settings: Defaults for the values above; read from the environment
            when omitted.
    """

    def __init__(
        self,
        *,
        phoneme_engine: Optional[PhoneticDictionary] = None,
        on_enriched: Optional[ChangeCallback] = None,
        enrichment_provider: Optional[EnrichmentProvider] = None,
        is_enrichment_enabled: Optional[EnrichmentFlag] = None,
        concurrency: Optional[int] = None,
        enrichment_delay: Optional[float] = None,
        settings: Optional[EngineSettings] = None,
    ) -> None:
        self._settings = settings or EngineSettings.from_env()
        self._phoneme_engine = phoneme_engine
        self._cache = EngineCache()
        self._disposed = False
        self._token_limit = self._settings.enrichment_token_limit
        self._logger = get_logger(__name__).bind(component="color_engine")

        # Only a provider built here is closed on teardown.
        self._owned_provider: Optional[DictionaryApiProvider] = None
        self._closing: "Optional[asyncio.Task[None]]" = None
        if enrichment_provider is None:
            enrichment_provider = DictionaryApiProvider.from_settings(self._settings)
            self._owned_provider = enrichment_provider
        if is_enrichment_enabled is None:
            enabled = self._settings.dictionary_api_enabled
            is_enrichment_enabled = lambda: enabled  # noqa: E731

        self._scheduler = EnrichmentScheduler(
            provider=enrichment_provider,
            cache=self._cache,
            baseline=self._fast_result,
            is_enabled=is_enrichment_enabled,
            on_change=on_enriched,
            version=ENGINE_VERSION,
            concurrency=self._settings.concurrency if concurrency is None else concurrency,
            delay=self._settings.enrichment_delay if enrichment_delay is None else enrichment_delay,
        )

        self._logger.info(
            "Colour engine initialised",
            context={
                "version": ENGINE_VERSION,
                "phoneme_engine": type(phoneme_engine).__name__ if phoneme_engine else None,
                "provider": getattr(enrichment_provider, "__name__", type(enrichment_provider).__name__),
                "concurrency": self._scheduler.concurrency,
                "token_limit": self._token_limit,
            },
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    @property
    def version(self) -> str:
        return ENGINE_VERSION

    @property
    def phoneme_engine(self) -> Optional[PhoneticDictionary]:
        return self._phoneme_engine

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def cache(self) -> EngineCache:
        return self._cache

    @property
    def scheduler(self) -> EnrichmentScheduler:
        return self._scheduler

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def _fast_result(self, token: str) -> SyntacticResult:
        if self._disposed:
            return classify(token, self._phoneme_engine, version=ENGINE_VERSION)
        key = cache_key(ENGINE_VERSION, token)
        cached = self._cache.get_fast(key)
        if cached is not None:
            return cached
        result = classify(token, self._phoneme_engine, version=ENGINE_VERSION)
        self._cache.set_fast(key, result)
        return result

    def _result_for(self, token: str) -> SyntacticResult:
        record = self._cache.get_record(cache_key(ENGINE_VERSION, token))
        if record is not None:
            return record.result
        return self._fast_result(token)

    def get_token_result(self, raw_token: str) -> SyntacticResult:
        """Enriched result when one is cached, otherwise the fast-pass one."""

        return self._result_for(normalize_token(raw_token))

    def get_enrichment_record(self, raw_token: str) -> Optional[EnrichmentRecord]:
        token = normalize_token(raw_token)
        if not token:
            return None
        return self._cache.get_record(cache_key(ENGINE_VERSION, token))

    # ------------------------------------------------------------------
    # Decoration
    # ------------------------------------------------------------------
    def decorate_text(self, text: str) -> DecoratedText:
        """Tokenize ``text`` and pair every token with its current result.

        Unique tokens are queued for enrichment as a side effect, unless the
        text has more tokens than the configured limit or enrichment is
        disabled; in both cases nothing is queued for the whole call.
        """

        try:
            tokens = tokenize(text)
            should_enrich = (
                bool(tokens)
                and not self._disposed
                and len(tokens) <= self._token_limit
                and self._scheduler.is_enabled()
            )
            seen = set()
            decorations: List[Decoration] = []
            for token in tokens:
                result = self._result_for(token.normalized)
                if should_enrich and token.normalized not in seen:
                    seen.add(token.normalized)
                    self._scheduler.enqueue(token.normalized)
                decorations.append(Decoration(start=token.start, end=token.end, result=result))
            return DecoratedText(tokens=tokens, decorations=decorations)
        except Exception:
            self._logger.warning("Decoration failed; returning empty result", exc_info=True)
            return DecoratedText(tokens=[], decorations=[])

    # ------------------------------------------------------------------
    # Enrichment
    # ------------------------------------------------------------------
    async def request_enrichment(self, raw_token: str) -> None:
        """Resolve once this token's enrichment attempt has finished.

        Concurrent calls for the same token share a single provider call.
        Never raises on provider failure; a cached record or a disabled
        flag returns immediately.
        """

        future = self._scheduler.enqueue(normalize_token(raw_token))
        if future is None:
            return
        await asyncio.shield(future)

    async def join(self) -> None:
        """Wait for every queued and running enrichment to finish."""

        await self._scheduler.join()
        if self._closing is not None:
            await asyncio.shield(self._closing)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def set_phoneme_engine(self, phoneme_engine: Optional[PhoneticDictionary]) -> None:
        """Swap the phonetic dictionary and invalidate everything derived from it."""

        if phoneme_engine is self._phoneme_engine:
            return
        self._phoneme_engine = phoneme_engine
        self._cache.clear()
        self._scheduler.reset()
        self._logger.info(
            "Phoneme engine swapped; caches cleared",
            context={"phoneme_engine": type(phoneme_engine).__name__ if phoneme_engine else None},
        )

    def dispose(self) -> None:
        """Stop enrichment and release resources owned by this engine.

        The HTTP client of a default provider is closed on the running loop
        in the background; ``await aclose()`` instead to wait for it.
        """

        if self._disposed:
            return
        self._disposed = True
        self._cache.clear()
        self._scheduler.close()
        self._schedule_provider_close()
        self._logger.info("Colour engine disposed")

    def _schedule_provider_close(self) -> None:
        if self._owned_provider is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Without a loop no request ever ran, so no client was opened.
            return
        self._closing = loop.create_task(self._close_provider())

    async def _close_provider(self) -> None:
        provider, self._owned_provider = self._owned_provider, None
        if provider is None:
            return
        try:
            await provider.aclose()
        except Exception:
            self._logger.warning("Closing enrichment provider failed", exc_info=True)

    async def aclose(self) -> None:
        """Dispose the engine and wait until its own provider is closed."""

        self.dispose()
        if self._closing is not None:
            await asyncio.shield(self._closing)
        else:
            await self._close_provider()


__all__ = ["ColorEngine", "ENGINE_VERSION"]
