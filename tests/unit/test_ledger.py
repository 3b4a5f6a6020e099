from __future__ import annotations

import json
from pathlib import Path

import pytest

from plugin_repo_builder.exceptions import ManifestError
from plugin_repo_builder.ledger import InMemoryLedger, StateLedger
from plugin_repo_builder.models import Manifest


def _manifest(plugin_id: str, commit: str) -> Manifest:
    return Manifest(
        id=plugin_id,
        repository=f"https://example.com/{plugin_id}.git",
        commit=commit,
        command="make",
        extra={"version": "1.0.0"},
    )


def test_load_missing_file_is_empty(tmp_path: Path) -> None:
    assert StateLedger(tmp_path / "state.json").load() == {}


def test_save_then_load(tmp_path: Path) -> None:
    ledger = StateLedger(tmp_path / "dist" / "state.json")
    snapshot = {"a": _manifest("a", "1"), "b": _manifest("b", "5")}

    ledger.save(snapshot)
    loaded = ledger.load()

    assert loaded == snapshot
    assert loaded["a"].extra == {"version": "1.0.0"}
    assert [p.name for p in ledger.path.parent.iterdir()] == ["state.json"]


def test_save_overwrites_whole_record(tmp_path: Path) -> None:
    ledger = StateLedger(tmp_path / "state.json")
    ledger.save({"a": _manifest("a", "1"), "b": _manifest("b", "5")})
    ledger.save({"c": _manifest("c", "9")})

    data = json.loads(ledger.path.read_text(encoding="utf-8"))
    assert list(data) == ["c"]
    assert data["c"]["commit"] == "9"


def test_reads_record_written_by_previous_runner(tmp_path: Path) -> None:
    """Compact state.json records (no id, no distFolder) are accepted."""
    path = tmp_path / "state.json"
    path.write_text(
        json.dumps({"a": {"repository": "https://x/a.git", "commit": "1", "command": "make"}}),
        encoding="utf-8",
    )
    assert StateLedger(path).load()["a"].commit == "1"


def test_invalid_json_raises(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text("not json", encoding="utf-8")
    with pytest.raises(ManifestError):
        StateLedger(path).load()


def test_in_memory_ledger_counts_saves() -> None:
    ledger = InMemoryLedger({"a": _manifest("a", "1")})
    snapshot = ledger.load()
    snapshot["b"] = _manifest("b", "2")

    assert list(ledger.load()) == ["a"]
    ledger.save(snapshot)
    assert ledger.saves == 1
    assert list(ledger.load()) == ["a", "b"]
