"""Bounded, deduplicating enrichment scheduler.

Each token moves ``idle -> queued -> in flight -> idle``. A token that is
queued or in flight owns exactly one future in ``_outstanding``; further
requests for it receive that same future. At most ``concurrency`` provider
calls run at once and the FIFO queue is pumped through ``loop.call_later``
so bursts of requests are spread out.

Everything here runs on one event loop. Cache and queue mutations never
await, so they need no locks; the provider call is the only suspension
point.
"""

from __future__ import annotations

import asyncio
import inspect
import time
from collections import deque
from typing import Any, Callable, Deque, Dict, Optional, Set

from scholomance.utils.observability import (
    create_counter,
    create_histogram,
    get_logger,
    record_exception,
    start_span,
)

from .cache import EngineCache, cache_key
from .fast_pass import ENGINE_VERSION
from .merge import build_signature, merge_enrichment
from .types import (
    ChangeCallback,
    EnrichmentFlag,
    EnrichmentPatch,
    EnrichmentProvider,
    EnrichmentRecord,
    SyntacticResult,
)

DEFAULT_CONCURRENCY = 3
DEFAULT_DELAY = 0.12

_REQUESTS = create_counter(
    "scholomance_enrichment_requests",
    "Enrichment requests by outcome at enqueue time.",
    ["outcome"],
)
_PROVIDER_FAILURES = create_counter(
    "scholomance_enrichment_provider_failures",
    "Enrichment provider calls that raised.",
)
_RECORDS_WRITTEN = create_counter(
    "scholomance_enrichment_records_written",
    "Enrichment records stored with a new signature.",
)
_PROVIDER_LATENCY = create_histogram(
    "scholomance_enrichment_provider_seconds",
    "Wall time spent awaiting the enrichment provider.",
)


def _release(future: "asyncio.Future[None]") -> None:
    """Resolve a waiter unless it is already done or its loop is gone."""

    if future.done() or future.get_loop().is_closed():
        return
    future.set_result(None)


class ChangeNotifier:
    """Coalesce any number of ``mark_dirty`` calls into one callback per tick."""

    def __init__(self, callback: Optional[ChangeCallback]) -> None:
        self._callback = callback
        self._dirty = False
        self._handle: Optional[asyncio.Handle] = None
        self._closed = False
        self._logger = get_logger(__name__).bind(component="change_notifier")

    @property
    def dirty(self) -> bool:
        return self._dirty

    def mark_dirty(self) -> None:
        if self._closed or self._callback is None:
            return
        self._dirty = True
        if self._handle is not None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._handle = loop.call_soon(self._flush)

    def _flush(self) -> None:
        self._handle = None
        if self._closed or not self._dirty or self._callback is None:
            return
        self._dirty = False
        try:
            self._callback()
        except Exception:
            self._logger.warning("Change callback raised", exc_info=True)

    def close(self) -> None:
        self._closed = True
        self._dirty = False
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


class EnrichmentScheduler:
    """Queue enrichment work per token and write merged records to the cache."""

    def __init__(
        self,
        *,
        provider: EnrichmentProvider,
        cache: EngineCache,
        baseline: Callable[[str], SyntacticResult],
        is_enabled: EnrichmentFlag,
        on_change: Optional[ChangeCallback] = None,
        version: str = ENGINE_VERSION,
        concurrency: int = DEFAULT_CONCURRENCY,
        delay: float = DEFAULT_DELAY,
    ) -> None:
        self._provider = provider
        self._cache = cache
        self._baseline = baseline
        self._is_enabled = is_enabled
        self._version = version
        self._concurrency = max(1, int(concurrency))
        self._delay = max(0.0, float(delay))
        self._notifier = ChangeNotifier(on_change)

        self._queue: Deque[str] = deque()
        self._outstanding: Dict[str, "asyncio.Future[None]"] = {}
        self._tasks: Set["asyncio.Task[None]"] = set()
        self._active = 0
        self._generation = 0
        self._pump_handle: Optional[asyncio.TimerHandle] = None
        self._closed = False
        self._logger = get_logger(__name__).bind(component="enrichment_scheduler")

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def concurrency(self) -> int:
        return self._concurrency

    @property
    def in_flight(self) -> int:
        return self._active

    @property
    def queued(self) -> int:
        return len(self._queue)

    @property
    def outstanding(self) -> int:
        return len(self._outstanding)

    @property
    def closed(self) -> bool:
        return self._closed

    def is_outstanding(self, token: str) -> bool:
        return token in self._outstanding

    def is_enabled(self) -> bool:
        try:
            return bool(self._is_enabled())
        except Exception:
            self._logger.warning("Enrichment flag raised; treating as disabled", exc_info=True)
            return False

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------
    def enqueue(self, token: str) -> "Optional[asyncio.Future[None]]":
        """Queue ``token`` unless it is cached, outstanding or not allowed.

        Returns the token's outstanding future, or ``None`` when there is
        nothing to wait for. Must be called from the event loop thread;
        without a running loop nothing is queued.
        """

        if self._closed or not token:
            return None
        if not self.is_enabled():
            _REQUESTS.labels(outcome="disabled").inc()
            return None
        if self._cache.get_record(cache_key(self._version, token)) is not None:
            _REQUESTS.labels(outcome="cached").inc()
            return None

        existing = self._outstanding.get(token)
        if existing is not None:
            _REQUESTS.labels(outcome="deduplicated").inc()
            return existing

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            _REQUESTS.labels(outcome="no_loop").inc()
            self._logger.debug("No running event loop; enrichment skipped", context={"token": token})
            return None

        future: "asyncio.Future[None]" = loop.create_future()
        self._outstanding[token] = future
        self._queue.append(token)
        _REQUESTS.labels(outcome="queued").inc()
        self._schedule_pump(loop)
        return future

    def _schedule_pump(self, loop: asyncio.AbstractEventLoop) -> None:
        if self._pump_handle is not None or self._closed:
            return
        self._pump_handle = loop.call_later(self._delay, self._pump)

    def _pump(self) -> None:
        self._pump_handle = None
        if self._closed:
            return
        if not self.is_enabled():
            self._abandon_queued()
            return

        loop = asyncio.get_running_loop()
        while self._active < self._concurrency and self._queue:
            token = self._queue.popleft()
            future = self._outstanding.get(token)
            if future is None or future.done():
                continue
            self._active += 1
            task = loop.create_task(self._run(token, future, self._generation))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    def _abandon_queued(self) -> None:
        abandoned = 0
        while self._queue:
            token = self._queue.popleft()
            future = self._outstanding.pop(token, None)
            if future is not None:
                _release(future)
            abandoned += 1
        if abandoned:
            self._logger.debug(
                "Enrichment disabled; queued work abandoned",
                context={"abandoned": abandoned},
            )

    async def _run(self, token: str, future: "asyncio.Future[None]", generation: int) -> None:
        try:
            await self._attempt(token, generation)
        except Exception:
            self._logger.warning(
                "Enrichment attempt failed", context={"token": token}, exc_info=True
            )
        finally:
            self._active -= 1
            if self._outstanding.get(token) is future:
                del self._outstanding[token]
            _release(future)
            if self._queue and not self._closed:
                self._schedule_pump(asyncio.get_running_loop())

    async def _call_provider(self, token: str) -> Any:
        result = self._provider(token)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def _attempt(self, token: str, generation: int) -> None:
        started = time.perf_counter()
        with start_span("scholomance.enrichment", {"token": token, "version": self._version}) as span:
            try:
                raw_patch = await self._call_provider(token)
            except Exception as error:
                record_exception(span, error)
                _PROVIDER_FAILURES.inc()
                self._logger.debug(
                    "Enrichment provider failed",
                    context={"token": token, "error": type(error).__name__},
                    exc_info=True,
                )
                return
            finally:
                _PROVIDER_LATENCY.observe(time.perf_counter() - started)

        if self._closed or generation != self._generation:
            self._logger.debug("Discarding stale enrichment", context={"token": token})
            return

        patch = EnrichmentPatch.coerce(raw_patch)
        merged = merge_enrichment(self._baseline(token), patch)
        if patch is None:
            is_valid = False
        elif patch.is_valid is not None:
            is_valid = patch.is_valid
        else:
            is_valid = bool(patch.evidence)

        signature = build_signature(merged)
        key = cache_key(self._version, token)
        existing = self._cache.get_record(key)
        if existing is not None and existing.signature == signature:
            return

        self._cache.set_record(
            key,
            EnrichmentRecord(
                result=merged,
                updated_at=time.time(),
                signature=signature,
                is_valid=is_valid,
            ),
        )
        _RECORDS_WRITTEN.inc()
        self._notifier.mark_dirty()

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------
    def reset(self) -> None:
        """Abandon queued and outstanding work.

        Waiters are released immediately. Provider calls already running
        finish, but their results are discarded. They still count against
        the concurrency ceiling until they return.
        """

        self._generation += 1
        self._queue.clear()
        outstanding = list(self._outstanding.values())
        self._outstanding.clear()
        for future in outstanding:
            _release(future)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.reset()
        if self._pump_handle is not None:
            self._pump_handle.cancel()
            self._pump_handle = None
        self._notifier.close()

    async def join(self) -> None:
        """Wait until nothing is queued, outstanding or running."""

        while self._outstanding or self._tasks:
            waiting = list(self._outstanding.values()) + list(self._tasks)
            await asyncio.gather(
                *(asyncio.shield(item) for item in waiting),
                return_exceptions=True,
            )


__all__ = [
    "DEFAULT_CONCURRENCY",
    "DEFAULT_DELAY",
    "ChangeNotifier",
    "EnrichmentScheduler",
]
