"""
Tests for file name parsing and directory listing
"""
import pytest

from snappair.files import DEFAULT_EXTS, FileEntry, list_directory


class TestFileEntryParse:

    def test_simple_name(self):
        e = FileEntry.parse("cat.jpg")
        assert (e.title, e.extension) == ("cat", "jpg")

    def test_multi_dot_first_split_ignores_extra_segments(self):
        e = FileEntry.parse("holiday.v2.jpg")
        assert e.title == "holiday"
        assert e.extension == "v2"
        assert not e.allowed(DEFAULT_EXTS)

    def test_multi_dot_last_split(self):
        e = FileEntry.parse("holiday.v2.jpg", split_mode="last")
        assert e.title == "holiday.v2"
        assert e.extension == "jpg"
        assert e.allowed(DEFAULT_EXTS)

    def test_no_extension(self):
        e = FileEntry.parse("README")
        assert e.title == "README"
        assert e.extension is None
        assert not e.allowed(DEFAULT_EXTS)

    def test_unknown_split_mode(self):
        with pytest.raises(ValueError):
            FileEntry.parse("a.jpg", split_mode="middle")

    def test_allow_list_is_case_sensitive(self):
        assert FileEntry.parse("a.tif").allowed(DEFAULT_EXTS)
        assert not FileEntry.parse("a.JPG").allowed(DEFAULT_EXTS)
        assert not FileEntry.parse("doc.pdf").allowed(DEFAULT_EXTS)


def test_list_directory_returns_sorted_files_only(tmp_path):
    (tmp_path / "b.jpg").write_bytes(b"")
    (tmp_path / "a.pdf").write_bytes(b"")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "c.jpg").write_bytes(b"")

    assert list_directory(tmp_path) == ["a.pdf", "b.jpg"]
