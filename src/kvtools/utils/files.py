"""Filesystem predicates and small file helpers.

The predicates never raise: any error while inspecting a path (missing,
permission denied, broken symlink) counts as "no".
"""

import shutil
from pathlib import Path

StrPath = str | Path

COPY_CHUNK_SIZE = 64 * 1024


def path_exists(path: StrPath) -> bool:
    """Check whether path exists (symlinks are followed)."""
    try:
        Path(path).stat()
    except (OSError, ValueError):
        return False
    return True


def path_not_exists(path: StrPath) -> bool:
    return not path_exists(path)


def is_dir(path: StrPath) -> bool:
    try:
        return Path(path).is_dir()
    except (OSError, ValueError):
        return False


def is_file(path: StrPath) -> bool:
    """Check whether path exists and is not a directory.

    Devices, sockets and pipes count as files; see is_regular_file().
    """
    return path_exists(path) and not is_dir(path)


def is_regular_file(path: StrPath) -> bool:
    try:
        return Path(path).is_file()
    except (OSError, ValueError):
        return False


def create_dir(path: StrPath) -> None:
    """Create a single directory (mode 0o755) unless it already exists.

    Parents are not created.

    Raises:
        FileNotFoundError: If the parent directory does not exist
    """
    if path_not_exists(path):
        Path(path).mkdir(mode=0o755)


def create_all_dir(path: StrPath) -> None:
    """Create a directory and any missing parents (mode 0o755)."""
    Path(path).mkdir(mode=0o755, parents=True, exist_ok=True)


def read_bytes(path: StrPath) -> bytes:
    return Path(path).read_bytes()


def read_text(path: StrPath, encoding: str = "utf-8") -> str:
    return Path(path).read_text(encoding=encoding)


def copy_file(dst: StrPath, src: StrPath) -> int:
    """Copy src into dst, creating or truncating dst.

    Returns:
        Number of bytes written

    Raises:
        FileNotFoundError: If src is not an existing file
    """
    if not is_file(src):
        raise FileNotFoundError(f"src file does not exist: {src}")
    with Path(src).open("rb") as fsrc, Path(dst).open("wb") as fdst:
        shutil.copyfileobj(fsrc, fdst)
        return fdst.tell()


def copy_file_n(dst: StrPath, src: StrPath, n: int) -> int:
    """Copy at most the first n bytes of src into dst.

    dst is created or truncated. A source shorter than n bytes is copied
    whole.

    Returns:
        Number of bytes written

    Raises:
        FileNotFoundError: If src is not an existing file
    """
    if not is_file(src):
        raise FileNotFoundError(f"src file does not exist: {src}")
    remaining = max(n, 0)
    written = 0
    with Path(src).open("rb") as fsrc, Path(dst).open("wb") as fdst:
        while remaining:
            chunk = fsrc.read(min(COPY_CHUNK_SIZE, remaining))
            if not chunk:
                break
            fdst.write(chunk)
            written += len(chunk)
            remaining -= len(chunk)
    return written
