import asyncio

import httpx
import pytest

from scholomance.config import EngineSettings
from scholomance.core import ColorEngine, get_evidence_value
from scholomance.providers import DictionaryApiProvider, build_patch

BASE_URL = "https://dict.test/api/v2/entries/en"

SPELL_PAYLOAD = [
    {
        "word": "spell",
        "phonetic": "/spɛl/",
        "meanings": [
            {
                "partOfSpeech": "noun",
                "definitions": [
                    {"definition": "A form of words used as a magical charm.", "example": "a spell to ward off evil"},
                    {"definition": "A state of enchantment."},
                    {"definition": "A short period of time."},
                ],
            },
            {
                "partOfSpeech": "verb",
                "definitions": [{"definition": "Write or name the letters of a word."}],
            },
            {
                "partOfSpeech": "interjection",
                "definitions": [{"definition": "Unused third part of speech."}],
            },
        ],
    }
]


def _handler(requests):
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        word = request.url.path.rsplit("/", 1)[-1]
        if word == "spell":
            return httpx.Response(200, json=SPELL_PAYLOAD)
        if word == "broken":
            return httpx.Response(503, json={"message": "unavailable"})
        return httpx.Response(404, json={"title": "No Definitions Found"})

    return handler


def _client(requests):
    return httpx.AsyncClient(transport=httpx.MockTransport(_handler(requests)))


def test_build_patch_extracts_definitions_usage_and_parts_of_speech():
    patch = build_patch(SPELL_PAYLOAD)

    definitions = [item.value for item in patch.evidence if item.type == "definition"]
    assert definitions == ["A form of words used as a magical charm.", "A state of enchantment."]
    assert [item.value for item in patch.evidence if item.type == "usage"] == ["a spell to ward off evil"]
    assert [item.value for item in patch.evidence if item.type == "phoneme"] == ["/spɛl/"]
    assert [chip.class_name for chip in patch.chips] == ["rune-noun", "rune-verb"]
    assert all(chip.source == "enriched" for chip in patch.chips)
    assert patch.confidence_boost == 0.15
    assert patch.is_valid is True


def test_build_patch_without_definitions_is_invalid():
    patch = build_patch({"word": "hmm", "phonetics": [{"audio": ""}, {"text": "/hm/"}], "meanings": []})

    assert patch.is_valid is False
    assert patch.confidence_boost == 0.0
    assert [item.value for item in patch.evidence] == ["/hm/"]


def test_build_patch_rejects_unexpected_payloads():
    assert build_patch("nope") is None
    assert build_patch([]) is None


@pytest.mark.asyncio
async def test_provider_fetches_quoted_word():
    requests = []
    provider = DictionaryApiProvider(BASE_URL + "/", client=_client(requests))

    patch = await provider("spell")

    assert str(requests[0].url) == f"{BASE_URL}/spell"
    assert patch.is_valid is True


@pytest.mark.asyncio
async def test_provider_returns_none_for_unknown_words():
    requests = []
    provider = DictionaryApiProvider(BASE_URL, client=_client(requests))

    assert await provider("zzxqjv") is None
    assert await provider("  ") is None
    assert len(requests) == 1


@pytest.mark.asyncio
async def test_provider_raises_on_server_errors():
    provider = DictionaryApiProvider(BASE_URL, client=_client([]))

    with pytest.raises(httpx.HTTPStatusError):
        await provider("broken")


@pytest.mark.asyncio
async def test_provider_leaves_injected_client_open():
    client = _client([])
    provider = DictionaryApiProvider(BASE_URL, client=client)

    await provider.aclose()

    assert client.is_closed is False
    await client.aclose()


def test_from_settings_uses_configured_url_and_timeout():
    provider = DictionaryApiProvider.from_settings(
        EngineSettings(dictionary_api_url="https://dict.test/v1/", dictionary_api_timeout=2.5)
    )

    assert provider.base_url == "https://dict.test/v1"
    assert provider.timeout == 2.5


@pytest.mark.asyncio
async def test_engine_enriches_through_dictionary_provider():
    client = _client([])
    provider = DictionaryApiProvider(BASE_URL, client=client)
    engine = ColorEngine(
        enrichment_provider=provider,
        is_enrichment_enabled=lambda: True,
        settings=EngineSettings(enrichment_delay=0.0),
    )

    await engine.request_enrichment("Spell")
    await engine.request_enrichment("broken")
    await engine.request_enrichment("zzxqjv")

    spell = engine.get_token_result("spell")
    assert spell.enriched is True
    assert get_evidence_value(spell, "definition") == "A form of words used as a magical charm."
    assert engine.get_enrichment_record("broken") is None
    assert engine.get_enrichment_record("zzxqjv").is_valid is False

    engine.dispose()
    await client.aclose()


@pytest.mark.asyncio
async def test_provider_skips_request_when_signal_is_set():
    requests = []
    provider = DictionaryApiProvider(BASE_URL, client=_client(requests))
    signal = asyncio.Event()

    assert (await provider("spell", signal=signal)).is_valid is True
    signal.set()
    assert await provider("spell", signal=signal) is None
    assert len(requests) == 1


@pytest.fixture
def owned_clients(monkeypatch):
    """Route every client the default provider builds through a mock transport."""

    clients = []
    real_client = httpx.AsyncClient

    def build_client(**kwargs):
        client = real_client(transport=httpx.MockTransport(_handler([])), **kwargs)
        clients.append(client)
        return client

    monkeypatch.setattr(httpx, "AsyncClient", build_client)
    return clients


def _default_engine():
    return ColorEngine(
        settings=EngineSettings(
            dictionary_api_enabled=True,
            dictionary_api_url=BASE_URL,
            enrichment_delay=0.0,
        )
    )


@pytest.mark.asyncio
async def test_dispose_closes_engine_owned_http_client(owned_clients):
    engine = _default_engine()

    await engine.request_enrichment("spell")
    assert engine.get_token_result("spell").enriched is True
    assert owned_clients[0].is_closed is False

    engine.dispose()
    await engine.join()

    assert owned_clients[0].is_closed is True


@pytest.mark.asyncio
async def test_aclose_waits_for_engine_owned_http_client(owned_clients):
    engine = _default_engine()
    await engine.request_enrichment("spell")

    await engine.aclose()

    assert engine.disposed is True
    assert owned_clients[0].is_closed is True
    await engine.aclose()


@pytest.mark.asyncio
async def test_engine_teardown_leaves_injected_provider_client_open():
    client = _client([])
    engine = ColorEngine(
        enrichment_provider=DictionaryApiProvider(BASE_URL, client=client),
        is_enrichment_enabled=lambda: True,
        settings=EngineSettings(enrichment_delay=0.0),
    )
    await engine.request_enrichment("spell")

    await engine.aclose()

    assert client.is_closed is False
    await client.aclose()
