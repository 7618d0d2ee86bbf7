"""Tests for filesystem helpers."""

import os
import stat
import sys
from pathlib import Path

import pytest

from kvtools.utils import files
from kvtools.utils.files import (
    copy_file,
    copy_file_n,
    create_all_dir,
    create_dir,
    is_dir,
    is_file,
    is_regular_file,
    path_exists,
    path_not_exists,
    read_bytes,
    read_text,
)


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    """A small text file."""
    path = tmp_path / "go.mod"
    path.write_text("module example\n")
    return path


class TestPredicates:
    """Tests for path predicates."""

    def test_missing_path(self, tmp_path: Path) -> None:
        """A missing path is neither file nor directory."""
        missing = tmp_path / "tmptest"

        assert path_exists(missing) is False
        assert path_not_exists(missing) is True
        assert is_dir(missing) is False
        assert is_file(missing) is False
        assert is_regular_file(missing) is False

    def test_directory(self, tmp_path: Path) -> None:
        """A directory is not a file."""
        assert path_exists(tmp_path) is True
        assert is_dir(tmp_path) is True
        assert is_file(tmp_path) is False

    def test_regular_file(self, sample_file: Path) -> None:
        """A regular file passes both file checks."""
        assert is_file(sample_file) is True
        assert is_regular_file(sample_file) is True
        assert is_dir(sample_file) is False

    def test_accepts_str_paths(self, sample_file: Path) -> None:
        """Plain strings work as paths."""
        assert is_file(str(sample_file)) is True

    @pytest.mark.skipif(not os.path.exists("/dev/null"), reason="no /dev/null")
    def test_device_is_file_but_not_regular(self) -> None:
        """Devices count as files but not regular files."""
        assert is_file("/dev/null") is True
        assert is_regular_file("/dev/null") is False


class TestCreateDir:
    """Tests for directory creation."""

    def test_create_dir(self, tmp_path: Path) -> None:
        """A single directory is created."""
        target = tmp_path / "tmptest"
        create_dir(target)

        assert is_dir(target)

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_create_dir_mode(self, tmp_path: Path) -> None:
        """New directories get rwxr-xr-x under the default umask."""
        old_umask = os.umask(0o022)
        try:
            target = tmp_path / "perm"
            create_dir(target)
        finally:
            os.umask(old_umask)

        assert stat.S_IMODE(target.stat().st_mode) == 0o755

    def test_create_dir_existing_is_noop(self, tmp_path: Path) -> None:
        """An existing directory is left alone."""
        create_dir(tmp_path)

        assert is_dir(tmp_path)

    def test_create_dir_does_not_create_parents(self, tmp_path: Path) -> None:
        """Missing parents are an error."""
        with pytest.raises(FileNotFoundError):
            create_dir(tmp_path / "a" / "b" / "c")

    def test_create_all_dir(self, tmp_path: Path) -> None:
        """All missing parents are created."""
        deep = tmp_path / "a" / "b" / "c"
        create_all_dir(deep)
        create_all_dir(deep)

        assert is_dir(deep)


class TestReadAndCopy:
    """Tests for reading and copying files."""

    def test_read(self, sample_file: Path) -> None:
        """Bytes and text reads agree."""
        assert read_bytes(sample_file) == b"module example\n"
        assert read_text(sample_file) == "module example\n"

    def test_read_missing_raises(self, tmp_path: Path) -> None:
        """Reading a missing file raises."""
        with pytest.raises(FileNotFoundError):
            read_bytes(tmp_path / "missing")

    def test_copy_file(self, sample_file: Path, tmp_path: Path) -> None:
        """The copy has the same content."""
        dst = tmp_path / "go.mod.bak"
        written = copy_file(dst, sample_file)

        assert written == len(b"module example\n")
        assert is_file(dst)
        assert read_bytes(dst) == read_bytes(sample_file)

    def test_copy_file_truncates_destination(self, sample_file: Path, tmp_path: Path) -> None:
        """An existing, longer destination is overwritten completely."""
        dst = tmp_path / "dst"
        dst.write_text("x" * 100)
        copy_file(dst, sample_file)

        assert read_text(dst) == "module example\n"

    def test_copy_file_missing_source(self, tmp_path: Path) -> None:
        """Copying a missing source raises."""
        with pytest.raises(FileNotFoundError, match="src file does not exist"):
            copy_file(tmp_path / "dst", tmp_path / "missing")

    def test_copy_file_directory_source(self, tmp_path: Path) -> None:
        """A directory is not a valid source."""
        with pytest.raises(FileNotFoundError):
            copy_file(tmp_path / "dst", tmp_path)

    def test_copy_file_n(self, sample_file: Path, tmp_path: Path) -> None:
        """Only the first n bytes are copied."""
        dst = tmp_path / "go.mod.bak.N"

        assert copy_file_n(dst, sample_file, 6) == 6
        assert read_text(dst) == "module"

    def test_copy_file_n_short_source(self, sample_file: Path, tmp_path: Path) -> None:
        """A source shorter than n is copied whole."""
        dst = tmp_path / "all"

        assert copy_file_n(dst, sample_file, 1000) == len(b"module example\n")

    def test_copy_file_n_spans_chunks(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Large copies are read in bounded chunks and stop at n bytes."""
        monkeypatch.setattr(files, "COPY_CHUNK_SIZE", 4)
        src = tmp_path / "src.bin"
        src.write_bytes(bytes(range(50)))
        dst = tmp_path / "dst.bin"

        assert copy_file_n(dst, src, 10) == 10
        assert dst.read_bytes() == bytes(range(10))
        assert copy_file_n(dst, src, 1000) == 50
        assert dst.read_bytes() == bytes(range(50))

    def test_copy_file_n_zero(self, sample_file: Path, tmp_path: Path) -> None:
        """n=0 creates an empty destination."""
        dst = tmp_path / "empty"

        assert copy_file_n(dst, sample_file, 0) == 0
        assert dst.read_bytes() == b""
