from __future__ import annotations

import json
from pathlib import Path

import pytest

from plugin_repo_builder.exceptions import IndexPublishError
from plugin_repo_builder.index import publish_index
from plugin_repo_builder.retirement import retire_plugin


def _make_slot(dist: Path, plugin_id: str, version: str | None = "1.0.0") -> Path:
    slot = dist / "plugins" / plugin_id
    slot.mkdir(parents=True)
    manifest = {"id": plugin_id}
    if version is not None:
        manifest["version"] = version
    (slot / "manifest.json").write_text(json.dumps(manifest), encoding="utf-8")
    return slot


def test_retire_removes_slot(tmp_path: Path) -> None:
    slot = _make_slot(tmp_path, "alpha")
    (slot / "nested").mkdir()

    assert retire_plugin(tmp_path, "alpha") is True
    assert not slot.exists()


def test_retire_missing_slot_is_noop(tmp_path: Path) -> None:
    assert retire_plugin(tmp_path, "ghost") is False
    assert retire_plugin(tmp_path, "ghost") is False


def test_retire_does_not_touch_other_slots(tmp_path: Path) -> None:
    _make_slot(tmp_path, "alpha")
    keep = _make_slot(tmp_path, "beta")

    retire_plugin(tmp_path, "alpha")

    assert keep.exists()


def test_publish_index_reads_slot_manifests(tmp_path: Path) -> None:
    _make_slot(tmp_path, "beta", "0.2.0")
    _make_slot(tmp_path, "alpha", "1.0.0")
    (tmp_path / "plugins" / "stray.txt").write_text("x", encoding="utf-8")

    repo = publish_index(tmp_path)

    expected = {"alpha": {"version": "1.0.0"}, "beta": {"version": "0.2.0"}}
    assert repo == expected
    assert json.loads((tmp_path / "repo.json").read_text(encoding="utf-8")) == expected


def test_publish_index_replaces_stale_index(tmp_path: Path) -> None:
    (tmp_path / "repo.json").write_text(json.dumps({"gone": {"version": "9"}}), encoding="utf-8")
    _make_slot(tmp_path, "alpha")

    publish_index(tmp_path)

    assert json.loads((tmp_path / "repo.json").read_text(encoding="utf-8")) == {
        "alpha": {"version": "1.0.0"}
    }


def test_publish_index_without_plugins_dir(tmp_path: Path) -> None:
    assert publish_index(tmp_path) == {}
    assert json.loads((tmp_path / "repo.json").read_text(encoding="utf-8")) == {}


def test_publish_index_missing_version_is_null(tmp_path: Path) -> None:
    _make_slot(tmp_path, "alpha", version=None)
    assert publish_index(tmp_path) == {"alpha": {"version": None}}


def test_publish_index_slot_without_manifest(tmp_path: Path) -> None:
    (tmp_path / "plugins" / "broken").mkdir(parents=True)
    with pytest.raises(IndexPublishError) as exc_info:
        publish_index(tmp_path)
    assert exc_info.value.plugin_id == "broken"


def test_retire_removes_stray_file(tmp_path: Path) -> None:
    plugins = tmp_path / "plugins"
    plugins.mkdir()
    (plugins / "B").write_text("not a directory", encoding="utf-8")

    assert retire_plugin(tmp_path, "B") is True
    assert not (plugins / "B").exists()


def test_retire_removes_symlink_without_following(tmp_path: Path) -> None:
    target = tmp_path / "elsewhere"
    target.mkdir()
    (target / "keep.txt").write_text("keep", encoding="utf-8")
    plugins = tmp_path / "plugins"
    plugins.mkdir()
    (plugins / "B").symlink_to(target, target_is_directory=True)

    assert retire_plugin(tmp_path, "B") is True
    assert not (plugins / "B").is_symlink()
    assert (target / "keep.txt").exists()
