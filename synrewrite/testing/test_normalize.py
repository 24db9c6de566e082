from pathlib import Path
import sys

PACKAGE_ROOT = Path(__file__).resolve().parents[1]
REPO_ROOT = PACKAGE_ROOT.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from synrewrite.shared.normalize.text import (
    MAX_PHRASES,
    escape_phrase,
    escape_query,
    is_quoted,
    normalize_phrase,
    normalize_query,
    strip_diacritics,
    tokenize,
)


def test_diacritics_and_whitespace_normalization() -> None:
    assert normalize_query("  Förskola \t\n  dagis  ") == "Forskola dagis"
    assert strip_diacritics("crème brûlée") == "creme brulee"


def test_escapes_removed_before_matching() -> None:
    assert normalize_query(r"real\-time \"red bike\"") == 'real-time "red bike"'


def test_empty_inputs_yield_empty_string() -> None:
    assert normalize_query("") == ""
    assert normalize_query(None) == ""
    assert normalize_query(" \t ") == ""


def test_normalize_is_idempotent() -> None:
    samples = [
        "Förskola  dagis",
        "a \u0301 b",
        "naïve\\ café\t\tÅngström",
        '"Škoda  Octavia"  real\\-time',
        "",
    ]
    for sample in samples:
        once = normalize_query(sample)
        assert normalize_query(once) == once


def test_normalize_phrase_drops_escapes_and_keeps_case() -> None:
    assert normalize_phrase("  Förskola   Väst ") == "Forskola Vast"
    assert normalize_phrase(r"real\-time") == "real-time"
    assert normalize_phrase(r"Real\-Tíme") == normalize_query(r"Real\-Tíme")


def test_tokenize_terms_and_quoted_phrases_in_order() -> None:
    assert tokenize('alloy "red bike" real-time') == ["alloy", '"red bike"', "real-time"]


def test_quoted_phrase_with_apostrophes_is_atomic() -> None:
    assert tokenize("\"rock 'n' roll\" now") == ["\"rock 'n' roll\"", "now"]


def test_tokenize_ignores_punctuation_only_input() -> None:
    assert tokenize("!!! ,,, ???") == []
    assert tokenize("") == []


def test_tokenize_caps_phrase_count() -> None:
    phrases = tokenize(" ".join(f"t{i}" for i in range(60)))
    assert len(phrases) == MAX_PHRASES == 50
    assert phrases[-1] == "t49"


def test_escape_query_syntax_characters() -> None:
    assert escape_query("real-time") == r"real\-time"
    assert escape_query("wi-fi/wlan") == r"wi\-fi\/wlan"
    assert escape_query("802.11:n") == r"802.11\:n"
    assert escape_query("a+b (c)") == r"a\+b \(c\)"


def test_escape_phrase_keeps_surrounding_quotes() -> None:
    assert escape_phrase('"red-bike"') == r'"red\-bike"'
    assert escape_phrase('"crimson bicycle') == r'\"crimson bicycle'
    assert escape_phrase("it's") == "it's"


def test_is_quoted() -> None:
    assert is_quoted('"red bike"')
    assert not is_quoted('"red')
    assert not is_quoted("red")
