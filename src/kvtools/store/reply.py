"""Typed decoding of raw store replies.

redis-py parses the wire format into ``str``/``bytes``, ``int``, ``list`` or
``None``. These helpers narrow such a reply to the type a command is declared
to return and raise :class:`DecodeError` when the shape does not match. A
``None`` reply is only accepted where the server uses it for "missing".
"""

from typing import Any

from redis.exceptions import ResponseError

from kvtools.exceptions import DecodeError

_TRUE_WORDS = frozenset({"1", "t", "true"})
_FALSE_WORDS = frozenset({"0", "f", "false"})


def _text(reply: Any) -> str | None:
    if isinstance(reply, str):
        return reply
    if isinstance(reply, bytes):
        try:
            return reply.decode("utf-8")
        except UnicodeDecodeError:
            return None
    return None


def _check_error(reply: Any) -> None:
    if isinstance(reply, ResponseError):
        raise reply


def decode_string(reply: Any) -> str | None:
    """Decode a bulk or status string reply.

    ``None`` means the key does not exist. Integer replies are rejected.
    """
    _check_error(reply)
    if reply is None:
        return None
    text = _text(reply)
    if text is None:
        raise DecodeError("string", reply)
    return text


def decode_bool(reply: Any) -> bool:
    """Decode an integer or textual boolean reply."""
    _check_error(reply)
    if isinstance(reply, int) and not isinstance(reply, bool):
        return reply != 0
    text = _text(reply)
    if text is not None:
        lowered = text.lower()
        if lowered in _TRUE_WORDS:
            return True
        if lowered in _FALSE_WORDS:
            return False
    raise DecodeError("bool", reply)


def decode_int(reply: Any) -> int:
    """Decode an integer reply."""
    _check_error(reply)
    if isinstance(reply, int) and not isinstance(reply, bool):
        return reply
    text = _text(reply)
    if text is not None:
        try:
            return int(text)
        except ValueError:
            pass
    raise DecodeError("int", reply)


def decode_uint(reply: Any) -> int:
    """Decode a non-negative integer reply (counts and lengths)."""
    try:
        value = decode_int(reply)
    except DecodeError:
        raise DecodeError("unsigned int", reply) from None
    if value < 0:
        raise DecodeError("unsigned int", reply)
    return value


def decode_values(reply: Any) -> list[Any]:
    """Decode an array reply without touching its elements."""
    _check_error(reply)
    if not isinstance(reply, list):
        raise DecodeError("array", reply)
    return reply


def decode_strings(reply: Any) -> list[str]:
    """Decode an array of bulk strings."""
    result = []
    for item in decode_values(reply):
        _check_error(item)
        text = _text(item)
        if text is None:
            raise DecodeError("array of strings", reply)
        result.append(text)
    return result


def decode_string_map(reply: Any) -> dict[str, str]:
    """Decode a flat field/value array (or a RESP3 map) into a dict."""
    if isinstance(reply, dict):
        reply = [item for pair in reply.items() for item in pair]
    items = decode_strings(reply)
    if len(items) % 2 != 0:
        raise DecodeError("field/value pairs", reply)
    return dict(zip(items[::2], items[1::2]))
