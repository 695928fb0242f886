"""Tests for collision-free filename allocation."""

from __future__ import annotations

from pathlib import Path

from clubdocs.services.allocator import allocate_filename


def _touch(directory: Path, *names: str) -> None:
    for name in names:
        (directory / name).write_bytes(b"x")


def test_unused_name_is_returned_unchanged(tmp_path: Path) -> None:
    assert allocate_filename(tmp_path, "report.md") == "report.md"


def test_counter_is_inserted_before_extension(tmp_path: Path) -> None:
    _touch(tmp_path, "report.md")
    assert allocate_filename(tmp_path, "report.md") == "report_0.md"

    _touch(tmp_path, "report_0.md", "report_1.md")
    assert allocate_filename(tmp_path, "report.md") == "report_2.md"


def test_only_final_dot_starts_the_extension(tmp_path: Path) -> None:
    _touch(tmp_path, "archive.tar.gz")
    assert allocate_filename(tmp_path, "archive.tar.gz") == "archive.tar_0.gz"


def test_name_without_extension_gets_plain_suffix(tmp_path: Path) -> None:
    _touch(tmp_path, "README")
    assert allocate_filename(tmp_path, "README") == "README_0"


def test_names_referenced_by_the_index_are_skipped(tmp_path: Path) -> None:
    # Index entries count as taken even when their file has not been written.
    assert allocate_filename(tmp_path, "x.png", taken=["x.png", "x_0.png"]) == "x_1.png"


def test_index_filename_is_never_allocated(tmp_path: Path) -> None:
    assert allocate_filename(tmp_path, "info.json") == "info_0.json"
