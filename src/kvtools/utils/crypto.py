"""Hashing utilities."""

import hashlib
from pathlib import Path

_CHUNK_SIZE = 64 * 1024


def md5_hex(text: str | bytes) -> str:
    """Return the lowercase hex MD5 digest of text (UTF-8 encoded)."""
    if isinstance(text, str):
        text = text.encode()
    return hashlib.md5(text).hexdigest()


def md5_file(path: str | Path) -> str:
    """Return the lowercase hex MD5 digest of a file's contents.

    The file is read in chunks, so large files are not loaded into memory.

    Raises:
        OSError: If the file cannot be opened or read
    """
    digest = hashlib.md5()
    with Path(path).open("rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()
