"""Tests for the change record and its store."""

import json
import logging
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from mddownloader.sync.state import (
    ERROR_MARKER,
    ChangeRecord,
    ChangeRecordStore,
    Failed,
    Synced,
)

SHA_A = "a" * 40
SHA_B = "b" * 40


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def store():
    """Create a change record store."""
    return ChangeRecordStore()


class TestChangeRecord:
    """Tests for ChangeRecord."""

    def test_mark_synced_and_failed(self):
        """Test recording outcomes."""
        record = ChangeRecord()
        record.mark_synced("a.md", SHA_A)
        record.mark_failed("b.md")

        assert record.get("a.md") == Synced(SHA_A)
        assert record.get("b.md") == Failed()
        assert record.get("c.md") is None
        assert "a.md" in record
        assert len(record) == 2

    def test_mark_synced_replaces_failure(self):
        """Test that a later success overwrites a failure."""
        record = ChangeRecord()
        record.mark_failed("a.md")
        record.mark_synced("a.md", SHA_A)

        assert record.get("a.md") == Synced(SHA_A)

    def test_to_dict_encodes_failure(self):
        """Failures are written with the on-disk marker, keys sorted."""
        record = ChangeRecord()
        record.mark_synced("z.md", SHA_A)
        record.mark_failed("a.md")

        data = record.to_dict()

        assert data == {"files": {"a.md": ERROR_MARKER, "z.md": SHA_A}}
        assert list(data["files"]) == ["a.md", "z.md"]

    def test_from_dict(self):
        """Test decoding the on-disk layout."""
        record = ChangeRecord.from_dict(
            {"files": {"a.md": SHA_A, "b.md": ERROR_MARKER}}
        )

        assert record.get("a.md") == Synced(SHA_A)
        assert record.get("b.md") == Failed()

    def test_from_dict_without_files(self):
        """An object without the files field is an empty record."""
        assert len(ChangeRecord.from_dict({})) == 0

    @pytest.mark.parametrize(
        "data",
        [[], "text", {"files": []}, {"files": {"a.md": 1}}, {"files": {"a.md": ""}}],
    )
    def test_from_dict_invalid(self, data):
        """Test that malformed records are rejected."""
        with pytest.raises(ValueError):
            ChangeRecord.from_dict(data)

    def test_prune(self):
        """Test removing entries not seen upstream."""
        record = ChangeRecord()
        record.mark_synced("keep.md", SHA_A)
        record.mark_synced("gone.md", SHA_A)
        record.mark_failed("also-gone.md")

        removed = record.prune(["keep.md", "new.md"])

        assert removed == ["also-gone.md", "gone.md"]
        assert list(record.files) == ["keep.md"]

    def test_scope_strips_prefix(self):
        """Test narrowing a shared record to one repository."""
        record = ChangeRecord()
        record.mark_synced("a/README.md", SHA_A)
        record.mark_failed("a/docs/x.md")
        record.mark_synced("b/README.md", SHA_B)

        scoped = record.scope("a/")

        assert scoped.files == {"README.md": Synced(SHA_A), "docs/x.md": Failed()}

    def test_scope_without_prefix_is_same_record(self):
        """An unshared record is used as-is."""
        record = ChangeRecord()

        assert record.scope("") is record

    def test_replace_scope(self):
        """Only the entries under the prefix are replaced."""
        record = ChangeRecord()
        record.mark_synced("a/old.md", SHA_A)
        record.mark_synced("b/README.md", SHA_B)
        scoped = ChangeRecord()
        scoped.mark_synced("README.md", SHA_A)

        record.replace_scope("a/", scoped)

        assert record.files == {
            "a/README.md": Synced(SHA_A),
            "b/README.md": Synced(SHA_B),
        }


class TestChangeRecordStoreLoad:
    """Tests for ChangeRecordStore.load."""

    def test_missing_file_returns_empty(self, store, temp_dir, caplog):
        """First run: no record file yet."""
        with caplog.at_level(logging.WARNING):
            record = store.load(temp_dir / "history.json")

        assert len(record) == 0
        assert "No change record" in caplog.text

    def test_corrupt_file_returns_empty(self, store, temp_dir, caplog):
        """Invalid JSON yields an empty record instead of failing."""
        path = temp_dir / "history.json"
        path.write_text("{not json", encoding="utf-8")

        with caplog.at_level(logging.WARNING):
            record = store.load(path)

        assert len(record) == 0
        assert "Failed to read change record" in caplog.text

    def test_wrong_shape_returns_empty(self, store, temp_dir, caplog):
        """Valid JSON with the wrong structure is treated as corrupt."""
        path = temp_dir / "history.json"
        path.write_text(json.dumps({"files": ["a.md"]}), encoding="utf-8")

        with caplog.at_level(logging.WARNING):
            record = store.load(path)

        assert len(record) == 0
        assert "Failed to parse change record" in caplog.text

    def test_directory_returns_empty(self, store, temp_dir):
        """An unreadable locator is not fatal."""
        assert len(store.load(temp_dir)) == 0

    def test_load_existing(self, store, temp_dir):
        """Test reading a record written by an earlier run."""
        path = temp_dir / "history.json"
        path.write_text(
            json.dumps({"files": {"a.md": SHA_A, "b.md": ERROR_MARKER}}),
            encoding="utf-8",
        )

        record = store.load(path)

        assert record.get("a.md") == Synced(SHA_A)
        assert record.get("b.md") == Failed()


class TestChangeRecordStoreSave:
    """Tests for ChangeRecordStore.save."""

    def test_save_writes_indented_json(self, store, temp_dir):
        """Test the on-disk format."""
        path = temp_dir / "history.json"
        record = ChangeRecord()
        record.mark_synced("docs/intro.md", SHA_A)
        record.mark_failed("README.md")

        assert store.save(path, record) is True

        text = path.read_text(encoding="utf-8")
        assert json.loads(text) == {
            "files": {"README.md": ERROR_MARKER, "docs/intro.md": SHA_A}
        }
        assert '\n    "files": {\n        "README.md"' in text

    def test_save_overwrites_whole_record(self, store, temp_dir):
        """Entries loaded and not touched this run are retained."""
        path = temp_dir / "history.json"
        path.write_text(
            json.dumps({"files": {"old.md": SHA_A, "a.md": SHA_A}}), encoding="utf-8"
        )
        record = store.load(path)
        record.mark_synced("a.md", SHA_B)

        store.save(path, record)

        assert store.load(path).to_dict() == {
            "files": {"a.md": SHA_B, "old.md": SHA_A}
        }

    def test_save_creates_parent_directory(self, store, temp_dir):
        """Test saving below a directory that does not exist yet."""
        path = temp_dir / "state" / "nested" / "history.json"

        assert store.save(path, ChangeRecord()) is True
        assert path.exists()

    def test_save_leaves_no_temp_files(self, store, temp_dir):
        """Test that the temporary file is renamed over the target."""
        path = temp_dir / "history.json"
        store.save(path, ChangeRecord())

        assert [p.name for p in temp_dir.iterdir()] == ["history.json"]

    def test_save_failure_returns_false(self, store, temp_dir, caplog):
        """Write failures are reported, not raised."""
        path = temp_dir / "history.json"
        path.write_text(json.dumps({"files": {"a.md": SHA_A}}), encoding="utf-8")

        with patch(
            "mddownloader.sync.state.os.replace", side_effect=OSError("disk full")
        ):
            with caplog.at_level(logging.ERROR):
                assert store.save(path, ChangeRecord()) is False

        assert "disk full" in caplog.text
        # Original record untouched, temp file cleaned up
        assert json.loads(path.read_text(encoding="utf-8")) == {
            "files": {"a.md": SHA_A}
        }
        assert [p.name for p in temp_dir.iterdir()] == ["history.json"]
