from scholomance.core.dictionaries import PhonemeTableDictionary
from scholomance.core.fast_pass import (
    DICTIONARY_CONFIDENCE,
    ENGINE_VERSION,
    HEURISTIC_CONFIDENCE,
    classify,
)
from scholomance.core.types import get_evidence_value


class ExplodingDictionary:
    def analyze_word(self, word):
        raise RuntimeError("dictionary offline")


def test_classify_is_deterministic():
    assert classify("spell") == classify("spell")


def test_heuristic_result_shape():
    result = classify("spell")

    assert result.engine_version == ENGINE_VERSION
    assert result.token == "spell"
    assert result.classes == ("school-will", "vowel-eh")
    assert result.confidence == HEURISTIC_CONFIDENCE
    assert result.enriched is False
    assert result.channels.text.class_name == "school-will"
    assert result.channels.accent.source == "school"
    assert [chip.type for chip in result.chips] == ["school", "rune"]
    assert result.chips[1].label == "5 phonemes"
    assert get_evidence_value(result, "rhyme") == "EH-LL"
    assert get_evidence_value(result, "phoneme") is None
    assert all(chip.source == "fast" for chip in result.chips)


def test_dictionary_backed_result_has_higher_confidence_and_phonemes():
    dictionary = PhonemeTableDictionary({"night": "N AY1 T"})

    result = classify("night", dictionary)

    assert result.confidence == DICTIONARY_CONFIDENCE
    assert result.classes == ("school-alchemy", "vowel-ay")
    assert get_evidence_value(result, "phoneme") == "N AY1 T"
    assert get_evidence_value(result, "rhyme") == "AY-T"


def test_unknown_dictionary_word_falls_back_to_spelling():
    dictionary = PhonemeTableDictionary({"night": "N AY1 T"})

    result = classify("fox", dictionary)

    assert result.confidence == HEURISTIC_CONFIDENCE
    assert result.classes == ("school-sonic", "vowel-oh")


def test_failing_dictionary_degrades_to_heuristic():
    result = classify("fox", ExplodingDictionary())

    assert result.confidence == HEURISTIC_CONFIDENCE
    assert result.classes == ("school-sonic", "vowel-oh")


def test_word_without_vowels_gets_fallback_family():
    result = classify("rhythm")

    assert result.classes == ("school-void", "vowel-uh")
    assert result.confidence == HEURISTIC_CONFIDENCE
    assert get_evidence_value(result, "rhyme") == "UH-open"


def test_letterless_token_gets_empty_result():
    result = classify("'")

    assert result.classes == ("school-void", "vowel-uh")
    assert result.confidence == 0.0
    assert result.evidence == ()
    assert [chip.type for chip in result.chips] == ["school"]


def test_feel_drives_accent_channel_and_chip():
    result = classify("night")

    assert result.channels.accent.source == "feel"
    assert result.channels.accent.class_name == "feel-fear"
    assert result.chips[-1].type == "feel"
    assert result.chips[-1].label == "Fear"
    assert result.channels.border.class_name == "school-psychic"
