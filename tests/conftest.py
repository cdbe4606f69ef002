import asyncio
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from scholomance.config import EngineSettings
from scholomance.core import ColorEngine, EnrichmentPatch, Evidence


class RecordingProvider:
    """Async provider stub that records calls and tracks concurrency."""

    def __init__(self, patch=None, *, delay: float = 0.0, error: Exception = None) -> None:
        self.patch = patch
        self.delay = delay
        self.error = error
        self.calls = []
        self.started_at = []
        self.completed = []
        self.active = 0
        self.max_active = 0
        self.gate = None

    async def __call__(self, token: str):
        self.calls.append(token)
        self.started_at.append(asyncio.get_running_loop().time())
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.gate is not None:
                await self.gate.wait()
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.error is not None:
                raise self.error
            return self.patch(token) if callable(self.patch) else self.patch
        finally:
            self.active -= 1
            self.completed.append(token)


def _definition_patch(token: str) -> EnrichmentPatch:
    return EnrichmentPatch(
        evidence=(Evidence(type="definition", value=f"meaning of {token}", source="enriched"),),
        confidence_boost=0.2,
    )


class ChangeCounter:
    def __init__(self) -> None:
        self.count = 0

    def __call__(self) -> None:
        self.count += 1


@pytest.fixture
def make_provider():
    """Factory for recording provider stubs."""

    return RecordingProvider


@pytest.fixture
def definition_patch():
    """Patch builder adding one definition and a 0.2 confidence boost."""

    return _definition_patch


@pytest.fixture
def change_counter():
    return ChangeCounter()


@pytest.fixture
def settings():
    return EngineSettings(enrichment_delay=0.0)


@pytest.fixture
def make_engine(settings):
    """Factory for engines wired to a stub provider with enrichment enabled."""

    engines = []

    def _factory(**kwargs):
        kwargs.setdefault("settings", settings)
        kwargs.setdefault("enrichment_provider", RecordingProvider())
        kwargs.setdefault("is_enrichment_enabled", lambda: True)
        engine = ColorEngine(**kwargs)
        engines.append(engine)
        return engine

    yield _factory

    for engine in engines:
        engine.dispose()
