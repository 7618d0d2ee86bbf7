"""String and sequence helpers, plus lenient boolean parsing."""

from collections.abc import Sequence
from typing import Any

TRUE_STRINGS = frozenset({"1", "t", "true", "on"})
FALSE_STRINGS = frozenset({"0", "f", "false", "off"})


def str_in_list(value: str, items: Sequence[str]) -> bool:
    return value in items


def in_sequence(value: Any, container: Any) -> tuple[bool, int]:
    """Find value in a list or tuple.

    Elements match only if they are equal and of the same type, so ``1`` is
    not found among ``["1"]`` and ``True`` is not found among ``[1]``.
    Strings, mappings and any other container types are never searched.

    Returns:
        (found, index), with index -1 when not found
    """
    if not isinstance(container, (list, tuple)):
        return False, -1
    for index, item in enumerate(container):
        if type(item) is type(value) and item == value:
            return True, index
    return False, -1


def find_index(items: Sequence[Any], value: Any) -> int:
    """Index of the first item equal to value, or -1."""
    for index, item in enumerate(items):
        if item == value:
            return index
    return -1


def substr(value: str, start: int, end: int) -> str:
    """Characters of value from start up to, not including, end."""
    return value[start:end]


def is_true(value: str) -> bool:
    """Parse a boolean flag.

    ``1``, ``t``, ``true`` and ``on`` (any case) are true; everything else,
    including the empty string and unparseable text, is false.
    """
    return value.lower() in TRUE_STRINGS


def not_true(value: str) -> bool:
    return not is_true(value)


def is_false(value: str) -> bool:
    """Strict counterpart of is_true().

    Only ``0``, ``f``, ``false`` and ``off`` (any case) are false. Unlike
    not_true(), unparseable text returns False here.
    """
    return value.lower() in FALSE_STRINGS
