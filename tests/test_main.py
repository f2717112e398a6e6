"""Tests for bot startup helpers."""

from pathlib import Path

import pytest

from tile_planner.main import read_token


class TestReadToken:
    def test_first_existing(self, tmp_path: Path):
        second = tmp_path / "second"
        second.write_text("  123:abc\n")
        assert read_token((tmp_path / "first", second)) == "123:abc"

    def test_order(self, tmp_path: Path):
        first = tmp_path / "first"
        second = tmp_path / "second"
        first.write_text("one")
        second.write_text("two")
        assert read_token((first, second)) == "one"

    def test_empty_skipped(self, tmp_path: Path):
        first = tmp_path / "first"
        second = tmp_path / "second"
        first.write_text("\n")
        second.write_text("two")
        assert read_token((first, second)) == "two"

    def test_missing(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            read_token((tmp_path / "nope",))
