import pytest

from scholomance.core.cache import EngineCache, cache_key
from scholomance.core.fast_pass import ENGINE_VERSION, classify
from scholomance.core.merge import build_signature, merge_enrichment
from scholomance.core.types import Chip, EnrichmentPatch, EnrichmentRecord, Evidence


def _patch(**overrides):
    values = {
        "chips": (Chip(type="rune", label="noun", class_name="rune-noun", confidence=0.6, source="enriched"),),
        "evidence": (Evidence(type="definition", value="a magic word", source="enriched"),),
        "confidence_boost": 0.15,
    }
    values.update(overrides)
    return EnrichmentPatch(**values)


def test_merge_without_patch_returns_baseline():
    baseline = classify("spell")

    assert merge_enrichment(baseline, None) is baseline


def test_merge_appends_after_baseline_entries():
    baseline = classify("spell")

    merged = merge_enrichment(baseline, _patch())

    assert merged.chips[: len(baseline.chips)] == baseline.chips
    assert merged.chips[-1].label == "noun"
    assert merged.evidence[: len(baseline.evidence)] == baseline.evidence
    assert merged.evidence[-1].value == "a magic word"
    assert merged.confidence == pytest.approx(0.55)
    assert merged.enriched is True
    assert baseline.enriched is False


def test_merge_clamps_confidence():
    baseline = classify("spell")

    assert merge_enrichment(baseline, _patch(confidence_boost=5)).confidence == 1.0
    assert merge_enrichment(baseline, _patch(confidence_boost=-5)).confidence == 0.0


@pytest.mark.parametrize("boost", [float("nan"), float("inf"), float("-inf")])
def test_merge_ignores_non_finite_boost(boost):
    baseline = classify("spell")

    merged = merge_enrichment(baseline, _patch(confidence_boost=boost))

    assert merged.confidence == baseline.confidence
    assert merged.enriched is True


def test_patch_coerce_drops_non_finite_boost():
    patch = EnrichmentPatch.coerce({"confidenceBoost": "nan"})

    assert patch.confidence_boost == 0.0


def test_merge_respects_explicit_enriched_flag():
    merged = merge_enrichment(classify("spell"), _patch(enriched=False))

    assert merged.enriched is False


def test_signature_tracks_observable_fields():
    baseline = classify("spell")
    merged = merge_enrichment(baseline, _patch())

    assert build_signature(baseline) == build_signature(classify("spell"))
    assert build_signature(merged) != build_signature(baseline)
    assert build_signature(merged) == build_signature(merge_enrichment(classify("spell"), _patch()))


def test_patch_coerce_accepts_camel_case_mappings():
    patch = EnrichmentPatch.coerce(
        {
            "chips": [{"type": "rune", "label": "verb", "className": "rune-verb", "confidence": "0.5"}],
            "evidence": [{"type": "usage", "value": "cast a spell"}, {"type": "bogus", "value": "x"}],
            "confidenceBoost": 0.1,
            "isValid": True,
        }
    )

    assert patch.chips[0].class_name == "rune-verb"
    assert patch.chips[0].confidence == 0.5
    assert patch.chips[0].source == "enriched"
    assert [item.type for item in patch.evidence] == ["usage"]
    assert patch.confidence_boost == 0.1
    assert patch.is_valid is True
    assert patch.enriched is None


def test_patch_coerce_rejects_non_mappings():
    assert EnrichmentPatch.coerce(None) is None
    assert EnrichmentPatch.coerce("definition") is None


def test_engine_cache_keys_by_version_and_token():
    cache = EngineCache()
    result = classify("spell")
    cache.set_fast(cache_key(ENGINE_VERSION, "spell"), result)
    cache.set_record(
        cache_key(ENGINE_VERSION, "spell"),
        EnrichmentRecord(result=result, updated_at=0.0, signature=build_signature(result), is_valid=False),
    )

    assert cache.get_fast(cache_key(ENGINE_VERSION, "spell")) is result
    assert cache.get_fast(cache_key("color-engine@2", "spell")) is None
    assert cache.get_fast(cache_key(ENGINE_VERSION, "Spell")) is None
    assert cache.stats() == {"fast": 1, "enriched": 1}

    cache.clear()

    assert cache.stats() == {"fast": 0, "enriched": 0}
    assert cache.get_record(cache_key(ENGINE_VERSION, "spell")) is None
