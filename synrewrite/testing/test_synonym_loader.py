from __future__ import annotations

from pathlib import Path
import sys

import pytest

PACKAGE_ROOT = Path(__file__).resolve().parents[1]
REPO_ROOT = PACKAGE_ROOT.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from synrewrite.store.synonym_loader import (  # noqa: E402
    StaticSynonymSource,
    SynonymLoader,
    load_synonyms,
    normalize_synonyms,
)

SYN_PATH = PACKAGE_ROOT / "shared" / "normalize" / "synonyms.yaml"


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _write(path: Path, content: str) -> Path:
    path.write_text(content, encoding="utf-8")
    return path


def test_load_normalizes_keys_and_values(tmp_path) -> None:
    path = _write(
        tmp_path / "synonyms.yaml",
        "dagis:\n  - förskola\n  - lekis\n  - dagis\n"
        "Café: kaffe\n"
        "empty: null\n",
    )
    synonyms = load_synonyms(path)
    assert dict(synonyms) == {
        "dagis": frozenset({"forskola", "lekis"}),
        "Cafe": frozenset({"kaffe"}),
    }


def test_load_rejects_non_mapping(tmp_path) -> None:
    path = _write(tmp_path / "synonyms.yaml", "- dagis\n- lekis\n")
    with pytest.raises(ValueError):
        load_synonyms(path)


def test_bidirectional_adds_reverse_edges() -> None:
    synonyms = normalize_synonyms({"bike": ["bicycle", "cycle"]}, bidirectional=True)
    assert synonyms["bike"] == frozenset({"bicycle", "cycle"})
    assert synonyms["bicycle"] == frozenset({"bike"})
    assert synonyms["cycle"] == frozenset({"bike"})


def test_snapshot_is_read_only() -> None:
    synonyms = StaticSynonymSource({"dagis": ["lekis"]}).get_synonyms()
    with pytest.raises(TypeError):
        synonyms["dagis"] = frozenset({"other"})  # type: ignore[index]


def test_default_dictionary_is_normalized() -> None:
    synonyms = load_synonyms(SYN_PATH)
    assert synonyms["dagis"] == frozenset({"forskola", "lekis"})
    assert '"red bike"' in synonyms


def test_loader_refreshes_after_interval(tmp_path) -> None:
    clock = FakeClock()
    path = _write(tmp_path / "synonyms.yaml", "dagis: [lekis]\n")
    loader = SynonymLoader(path, refresh_seconds=300, clock=clock)

    first = loader.get_synonyms()
    assert first["dagis"] == frozenset({"lekis"})

    _write(path, "dagis: [forskola]\n")
    clock.now += 10
    assert loader.get_synonyms() is first

    clock.now += 300
    second = loader.get_synonyms()
    assert second["dagis"] == frozenset({"forskola"})
    assert first["dagis"] == frozenset({"lekis"})


def test_loader_without_interval_only_refreshes_on_demand(tmp_path) -> None:
    clock = FakeClock()
    path = _write(tmp_path / "synonyms.yaml", "dagis: [lekis]\n")
    loader = SynonymLoader(path, refresh_seconds=0, clock=clock)
    first = loader.get_synonyms()

    _write(path, "bike: [bicycle]\n")
    clock.now += 10_000
    assert loader.get_synonyms() is first

    refreshed = loader.refresh()
    assert "bike" in refreshed
    assert "dagis" not in refreshed


def test_failed_reload_keeps_previous_snapshot(tmp_path, caplog) -> None:
    path = _write(tmp_path / "synonyms.yaml", "dagis: [lekis]\n")
    loader = SynonymLoader(path, refresh_seconds=0)
    first = loader.get_synonyms()

    _write(path, "dagis: [lekis\n")
    with caplog.at_level("WARNING", logger="synrewrite.synonyms"):
        assert loader.refresh() is first
    assert "Could not load synonyms" in caplog.text


def test_missing_file_yields_empty_snapshot(tmp_path) -> None:
    path = tmp_path / "synonyms.yaml"
    loader = SynonymLoader(path, refresh_seconds=0)
    assert dict(loader.get_synonyms()) == {}
    stats = loader.stats()
    assert stats["phrases"] == 0
    assert stats["loaded"] is False

    _write(path, "dagis: [lekis]\n")
    assert loader.refresh()["dagis"] == frozenset({"lekis"})
    assert loader.stats()["loaded"] is True


def test_failed_reload_keeps_loaded_flag(tmp_path) -> None:
    path = _write(tmp_path / "synonyms.yaml", "dagis: [lekis]\n")
    loader = SynonymLoader(path, refresh_seconds=0)
    loader.get_synonyms()

    path.unlink()
    loader.refresh()
    stats = loader.stats()
    assert stats["loaded"] is True
    assert stats["phrases"] == 1


def test_load_removes_query_escapes(tmp_path) -> None:
    path = _write(tmp_path / "synonyms.yaml", "'real\\-time':\n  - 'live\\-stream'\n")
    synonyms = load_synonyms(path)
    assert dict(synonyms) == {"real-time": frozenset({"live-stream"})}
