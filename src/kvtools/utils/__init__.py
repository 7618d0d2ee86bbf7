"""Utility modules."""

from kvtools.utils.crypto import md5_file, md5_hex
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
from kvtools.utils.strings import (
    find_index,
    in_sequence,
    is_false,
    is_true,
    not_true,
    str_in_list,
    substr,
)

__all__ = [
    "copy_file",
    "copy_file_n",
    "create_all_dir",
    "create_dir",
    "find_index",
    "in_sequence",
    "is_dir",
    "is_false",
    "is_file",
    "is_regular_file",
    "is_true",
    "md5_file",
    "md5_hex",
    "not_true",
    "path_exists",
    "path_not_exists",
    "read_bytes",
    "read_text",
    "str_in_list",
    "substr",
]
