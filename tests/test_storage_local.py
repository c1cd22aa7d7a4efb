"""Tests for the local directory store."""

from io import BytesIO

import pytest

from release_prepare.storage import LocalStore, StorageError


class TestLocalStoreRead:
    """Tests for reading from a LocalStore."""

    def test_read(self, tmp_path):
        (tmp_path / "_meta").mkdir()
        (tmp_path / "_meta" / "catalog.xml").write_bytes(b"<releases />")

        store = LocalStore(tmp_path)
        assert store.read("_meta/catalog.xml") == b"<releases />"

    def test_read_missing(self, tmp_path):
        """Missing files should raise StorageError with not_found code."""
        store = LocalStore(tmp_path)
        with pytest.raises(StorageError) as exc_info:
            store.read("missing.xml")
        assert exc_info.value.code == "not_found"
        assert exc_info.value.path == "missing.xml"

    def test_read_stream_and_size(self, tmp_path):
        (tmp_path / "install.zip").write_bytes(b"zip content")
        store = LocalStore(tmp_path)

        with store.read_stream("install.zip") as stream:
            assert stream.read() == b"zip content"
        assert store.size("install.zip") == len(b"zip content")

    def test_size_missing(self, tmp_path):
        with pytest.raises(StorageError) as exc_info:
            LocalStore(tmp_path).size("update.zip")
        assert exc_info.value.code == "not_found"

    @pytest.mark.parametrize("path", ["../outside", "/etc/passwd", ""])
    def test_rejects_paths_outside_root(self, tmp_path, path):
        with pytest.raises(StorageError) as exc_info:
            LocalStore(tmp_path).read(path)
        assert exc_info.value.code == "invalid_path"


class TestLocalStoreWrite:
    """Tests for writing to a LocalStore."""

    def test_write_creates_parents(self, tmp_path):
        store = LocalStore(tmp_path)
        store.write("_meta/catalog.xml", b"data")
        assert (tmp_path / "_meta" / "catalog.xml").read_bytes() == b"data"

    def test_write_replaces_existing(self, tmp_path):
        store = LocalStore(tmp_path)
        store.write("file.txt", b"old")
        store.write("file.txt", b"new")
        assert store.read("file.txt") == b"new"

    def test_write_leaves_no_temp_files(self, tmp_path):
        store = LocalStore(tmp_path)
        store.write("sw6/file.txt", b"data")
        assert [p.name for p in (tmp_path / "sw6").iterdir()] == ["file.txt"]

    def test_write_stream(self, tmp_path):
        store = LocalStore(tmp_path)
        content = b"A" * (200 * 1024)

        written = store.write_stream("sw6/install.zip", BytesIO(content))

        assert written == len(content)
        assert (tmp_path / "sw6" / "install.zip").read_bytes() == content

    def test_write_failure_raises_storage_error(self, tmp_path):
        """A file in place of the parent directory should fail cleanly."""
        (tmp_path / "sw6").write_bytes(b"not a directory")
        store = LocalStore(tmp_path)

        with pytest.raises(StorageError) as exc_info:
            store.write("sw6/install.zip", b"data")
        assert exc_info.value.code == "os_error"
