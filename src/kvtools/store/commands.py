"""Command names and argument rewriting for the prefixed store."""

from collections.abc import Iterable, Mapping
from typing import Any

# Commands whose first argument is a key, set name or hash name.
PREFIXED_COMMANDS = frozenset({
    "GET", "SET", "EXISTS", "DEL", "TYPE", "EXPIRE", "TTL",
    "RPUSH", "LPOP", "RPOP", "LLEN", "LRANGE",
    "SADD", "SREM", "SISMEMBER", "SMEMBERS", "SCARD",
    "HSET", "HMSET", "HGET", "HGETALL", "HLEN", "HEXISTS", "HVALS", "HKEYS",
    "HDEL",
})

OK = "OK"
PONG = "PONG"


def apply_prefix(prefix: str, command: str, args: tuple[Any, ...]) -> tuple[Any, ...]:
    """Return ``args`` with ``prefix`` applied to the key argument.

    Only commands in :data:`PREFIXED_COMMANDS` are rewritten, and only when the
    first argument is a non-empty string that does not already start with the
    prefix. ``command`` must already be upper-cased.
    """
    if not args or command not in PREFIXED_COMMANDS:
        return args
    key = args[0]
    if not isinstance(key, str) or key == "" or key.startswith(prefix):
        return args
    return (prefix + key, *args[1:])


def key_with_values(key: str, values: Iterable[Any]) -> list[Any]:
    """Flatten a key followed by values into one argument list, keeping order."""
    return [key, *values]


def key_with_mapping(key: str, mapping: Mapping[str, Any]) -> list[Any]:
    """Flatten a hash name followed by field/value pairs."""
    args: list[Any] = [key]
    for field, value in mapping.items():
        args.extend((field, value))
    return args
