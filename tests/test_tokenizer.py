from scholomance.core.tokenizer import normalize_token, tokenize


def test_tokenize_reports_offsets_into_source_text():
    text = "The quick, brown fox!"

    tokens = tokenize(text)

    assert [token.raw for token in tokens] == ["The", "quick", "brown", "fox"]
    assert [(token.start, token.end) for token in tokens] == [(0, 3), (4, 9), (11, 16), (17, 20)]
    assert all(text[token.start:token.end] == token.raw for token in tokens)
    assert [token.normalized for token in tokens] == ["the", "quick", "brown", "fox"]


def test_tokenize_keeps_apostrophes_inside_words():
    tokens = tokenize("Don’t stop, can't")

    assert [token.raw for token in tokens] == ["Don’t", "stop", "can't"]
    assert tokens[0].normalized == "don't"


def test_tokenize_handles_empty_and_non_string_input():
    assert tokenize("") == []
    assert tokenize("  ,;! 42 ") == []
    assert tokenize(None) == []
    assert tokenize(17) == []


def test_normalize_token_folds_case_and_punctuation():
    assert normalize_token("Night") == "night"
    assert normalize_token("NIGHT!!") == "night"
    assert normalize_token("night") == "night"
    assert normalize_token("‘tis") == "'tis"


def test_normalize_token_rejects_non_strings():
    assert normalize_token(None) == ""
    assert normalize_token(3.5) == ""
    assert normalize_token("") == ""
