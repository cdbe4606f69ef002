"""Runtime settings for the colour engine.

Settings default to the values the engine was tuned with and can be
overridden per process through ``SCHOLOMANCE_*`` environment variables.
Explicit constructor arguments on :class:`~scholomance.core.engine.ColorEngine`
win over both.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from scholomance.utils.observability import get_logger

logger = get_logger(__name__).bind(component="config")

ENV_PREFIX = "SCHOLOMANCE_"

DEFAULT_CONCURRENCY = 3
DEFAULT_ENRICHMENT_DELAY = 0.12
DEFAULT_ENRICHMENT_TOKEN_LIMIT = 400
DEFAULT_DICTIONARY_API_URL = "https://api.dictionaryapi.dev/api/v2/entries/en"
DEFAULT_DICTIONARY_API_TIMEOUT = 5.0

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


def _parse_bool(value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUTHY:
        return True
    if normalized in _FALSY:
        return False
    raise ValueError(f"not a boolean: {value!r}")


@dataclass(frozen=True)
class EngineSettings:
    """Tunables for enrichment scheduling and the default provider."""

    concurrency: int = DEFAULT_CONCURRENCY
    enrichment_delay: float = DEFAULT_ENRICHMENT_DELAY
    enrichment_token_limit: int = DEFAULT_ENRICHMENT_TOKEN_LIMIT
    dictionary_api_enabled: bool = False
    dictionary_api_url: str = DEFAULT_DICTIONARY_API_URL
    dictionary_api_timeout: float = DEFAULT_DICTIONARY_API_TIMEOUT

    def __post_init__(self) -> None:
        # Frozen, so clamp through object.__setattr__.
        object.__setattr__(self, "concurrency", max(1, int(self.concurrency)))
        object.__setattr__(self, "enrichment_delay", max(0.0, float(self.enrichment_delay)))
        object.__setattr__(
            self, "enrichment_token_limit", max(0, int(self.enrichment_token_limit))
        )
        object.__setattr__(
            self, "dictionary_api_timeout", max(0.0, float(self.dictionary_api_timeout))
        )
        object.__setattr__(self, "dictionary_api_url", str(self.dictionary_api_url).rstrip("/"))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineSettings":
        """Build settings from ``SCHOLOMANCE_*`` variables.

        Values that fail to parse are ignored with a warning and the default
        is used instead.
        """

        env = os.environ if environ is None else environ
        parsers: Dict[str, Callable[[str], Any]] = {
            "concurrency": int,
            "enrichment_delay": float,
            "enrichment_token_limit": int,
            "dictionary_api_enabled": _parse_bool,
            "dictionary_api_url": str,
            "dictionary_api_timeout": float,
        }

        overrides: Dict[str, Any] = {}
        for field_name, parser in parsers.items():
            env_name = f"{ENV_PREFIX}{field_name.upper()}"
            raw = env.get(env_name)
            if raw is None:
                continue
            try:
                overrides[field_name] = parser(raw)
            except (TypeError, ValueError):
                logger.warning(
                    "Ignoring unparseable setting",
                    context={"variable": env_name, "value": raw},
                )
        return cls(**overrides)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "concurrency": self.concurrency,
            "enrichment_delay": self.enrichment_delay,
            "enrichment_token_limit": self.enrichment_token_limit,
            "dictionary_api_enabled": self.dictionary_api_enabled,
            "dictionary_api_url": self.dictionary_api_url,
            "dictionary_api_timeout": self.dictionary_api_timeout,
        }


__all__ = [
    "EngineSettings",
    "ENV_PREFIX",
    "DEFAULT_CONCURRENCY",
    "DEFAULT_ENRICHMENT_DELAY",
    "DEFAULT_ENRICHMENT_TOKEN_LIMIT",
    "DEFAULT_DICTIONARY_API_URL",
    "DEFAULT_DICTIONARY_API_TIMEOUT",
]
