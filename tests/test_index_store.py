"""Tests for the JSON index store."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from clubdocs.models import DocumentRecord
from clubdocs.services.index_store import IndexStore, lock_for
from clubdocs.utils.errors import StorageError


def _record(title: str, filename: str) -> DocumentRecord:
    return DocumentRecord(
        title=title, category="c1", description="d", filename=filename
    )


def test_missing_index_loads_as_empty(tmp_path: Path) -> None:
    assert IndexStore(tmp_path).load() == []


@pytest.mark.parametrize("content", ["{not json", '{"title": "A"}'])
def test_unusable_index_loads_as_empty(
    tmp_path: Path, content: str, caplog: pytest.LogCaptureFixture
) -> None:
    (tmp_path / "info.json").write_text(content, encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        assert IndexStore(tmp_path).load() == []

    assert "info.json" in caplog.text


def test_save_writes_ordered_json_array(tmp_path: Path) -> None:
    directory = tmp_path / "events"
    store = IndexStore(directory)
    records = [_record("B", "b.png"), _record("A", "a.png")]

    store.save(records)

    payload = json.loads((directory / "info.json").read_text(encoding="utf-8"))
    assert [item["filename"] for item in payload] == ["b.png", "a.png"]
    assert all("author" not in item for item in payload)
    assert [record.id for record in store.load()] == [record.id for record in records]
    assert sorted(path.name for path in directory.iterdir()) == ["info.json"]


def test_legacy_records_keep_unknown_keys_and_gain_an_id(tmp_path: Path) -> None:
    legacy = [
        {
            "title": "A",
            "category": "c1",
            "description": "d",
            "filename": "a.png",
            "date": "2024-09-01",
        }
    ]
    (tmp_path / "info.json").write_text(json.dumps(legacy), encoding="utf-8")
    store = IndexStore(tmp_path)

    records = store.load()
    store.save(records)

    saved = json.loads((tmp_path / "info.json").read_text(encoding="utf-8"))[0]
    assert saved["date"] == "2024-09-01"
    assert saved["id"] == records[0].id


def test_transaction_saves_on_success_only(tmp_path: Path) -> None:
    store = IndexStore(tmp_path)

    with store.transaction() as records:
        records.append(_record("A", "a.png"))
    assert [record.filename for record in store.load()] == ["a.png"]

    with pytest.raises(RuntimeError):
        with store.transaction() as records:
            records.clear()
            raise RuntimeError("abort")
    assert [record.filename for record in store.load()] == ["a.png"]


def test_save_failure_raises_storage_error(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(StorageError):
        IndexStore(blocker).save([_record("A", "a.png")])


def test_one_lock_per_directory(tmp_path: Path) -> None:
    first = tmp_path / "events"
    second = tmp_path / "docs"

    assert lock_for(first) is lock_for(tmp_path / "events" / ".." / "events")
    assert lock_for(first) is not lock_for(second)
    assert IndexStore(first).lock is IndexStore(first).lock


def test_invalid_entries_are_skipped_but_written_back(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    good = {"id": "a1", "title": "A", "category": "c1", "description": "d", "filename": "a.png"}
    bad = {"title": 1, "filename": "b.png"}
    (tmp_path / "info.json").write_text(json.dumps([bad, good]), encoding="utf-8")
    store = IndexStore(tmp_path)

    with caplog.at_level(logging.WARNING):
        records = store.load()

    assert [record.filename for record in records] == ["a.png"]
    assert records.filenames() == ["a.png", "b.png"]
    assert "entry 0" in caplog.text

    records.append(_record("C", "c.png"))
    store.save(records)

    saved = json.loads((tmp_path / "info.json").read_text(encoding="utf-8"))
    assert [item["filename"] for item in saved] == ["a.png", "c.png", "b.png"]
    assert saved[2] == bad


def test_missing_ids_are_persisted_on_first_read(tmp_path: Path) -> None:
    legacy = [{"title": "A", "category": "c1", "description": "d", "filename": "a.png"}]
    (tmp_path / "info.json").write_text(json.dumps(legacy), encoding="utf-8")
    store = IndexStore(tmp_path)

    first = store.load()
    second = store.load()

    assert first[0].id == second[0].id
    saved = json.loads((tmp_path / "info.json").read_text(encoding="utf-8"))
    assert saved[0]["id"] == first[0].id
