"""Tests for the reconcile maintenance command."""

from __future__ import annotations

import json
from pathlib import Path

from clubdocs import maintenance
from clubdocs.config import get_settings
from clubdocs.models import DocumentRecord
from clubdocs.services.documents import get_collection


def _seed_events(storage_root: Path) -> None:
    collection = get_collection("events", get_settings())
    collection.index.save(
        [
            DocumentRecord(title="A", category="c", description="d", filename="a.png"),
            DocumentRecord(title="B", category="c", description="d", filename="b.png"),
        ]
    )
    (storage_root / "events" / "a.png").write_bytes(b"a")


def test_reconcile_reports_missing_files(storage_root: Path, capsys) -> None:
    _seed_events(storage_root)

    status = maintenance.main(["reconcile", "--collection", "events"])

    assert status == 1
    report = json.loads(capsys.readouterr().out)
    assert report["collection"] == "events"
    assert [item["filename"] for item in report["missing_files"]] == ["b.png"]
    assert report["untracked_files"] == []


def test_reconcile_prune_restores_consistency(storage_root: Path, capsys) -> None:
    _seed_events(storage_root)

    status = maintenance.main(["reconcile", "--collection", "events", "--prune"])

    assert status == 0
    assert json.loads(capsys.readouterr().out)["pruned"] == 1
    remaining = get_collection("events", get_settings()).list_documents()
    assert [record.filename for record in remaining] == ["a.png"]


def test_reconcile_defaults_to_every_collection(capsys) -> None:
    status = maintenance.main(["reconcile"])

    assert status == 0
    output = capsys.readouterr().out
    for name in ("events", "docs", "writeups"):
        assert f'"collection": "{name}"' in output
