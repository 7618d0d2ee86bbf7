"""kvtools exceptions."""

from typing import Any

from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError


class KVToolsError(Exception):
    """Base exception for kvtools."""

    pass


class ConfigError(KVToolsError):
    """Configuration error."""

    pass


class StoreError(KVToolsError):
    """Base exception for the key-value store layer."""

    pass


class DecodeError(StoreError):
    """A reply did not have the shape the caller asked for."""

    def __init__(self, expected: str, reply: Any) -> None:
        self.expected = expected
        self.reply = reply
        super().__init__(f"cannot decode {type(reply).__name__} reply as {expected}")


class NotAcknowledgedError(StoreError):
    """A write completed but the server did not acknowledge it with OK."""

    def __init__(self, command: str, reply: Any) -> None:
        self.command = command
        self.reply = reply
        super().__init__(f"{command} not acknowledged: {reply!r}")


class BatchClosedError(StoreError):
    """The transaction batch has already been committed."""

    def __init__(self) -> None:
        super().__init__("transaction batch closed")


class PoolExhaustedError(StoreError, RedisConnectionError):
    """No connection available and the pool is configured not to wait."""

    pass


class PoolClosedError(StoreError, RedisConnectionError):
    """Connection requested from a closed pool."""

    pass


class TransactionError(StoreError, ResponseError):
    """A command failed inside EXEC after the transaction was applied.

    The server does not roll back the other commands. ``replies`` holds
    the full EXEC reply in order, with the failures as ``ResponseError``
    items, so the effect of every command can still be inspected.
    """

    def __init__(self, error: ResponseError, replies: list[Any]) -> None:
        self.replies = replies
        self.failed = [i for i, reply in enumerate(replies) if isinstance(reply, ResponseError)]
        super().__init__(str(error))
