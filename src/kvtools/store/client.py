"""Key-prefixing Redis store.

Every command is sent on a connection borrowed from the pool for just that
call. Commands listed in :data:`~kvtools.store.commands.PREFIXED_COMMANDS`
have the store's prefix applied to their key argument.
"""

from collections.abc import Mapping
from typing import Any

from kvtools.config import Config
from kvtools.exceptions import NotAcknowledgedError
from kvtools.observability import Timer, emit_timer, get_logger
from kvtools.store.commands import (
    OK,
    PONG,
    apply_prefix,
    key_with_mapping,
    key_with_values,
)
from kvtools.store.pool import IdlePolicy, create_pool
from kvtools.store.reply import (
    decode_bool,
    decode_int,
    decode_string,
    decode_string_map,
    decode_strings,
    decode_uint,
)
from kvtools.store.transaction import TransactionBatch

logger = get_logger(__name__)


class PrefixedStore:
    """Redis client that namespaces keys with a prefix.

    Example:
        store = PrefixedStore.from_url("redis://localhost:6379/0", prefix="app:")
        store.set("user", "alice")          # SET app:user alice
        store.get("app:user")               # already prefixed, sent unchanged

    Missing keys are reported as ``None`` by ``get``, ``lpop``, ``rpop`` and
    ``hget``. Every failure raises: transport and server errors come from
    redis-py unchanged, malformed replies raise ``DecodeError``.
    """

    def __init__(self, pool: IdlePolicy, prefix: str = "") -> None:
        """Initialize the store.

        Args:
            pool: Pool the store borrows connections from. The store owns it.
            prefix: Prepended to the key of prefix-eligible commands
        """
        self.pool = pool
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str = "", **pool_options: Any) -> "PrefixedStore":
        """Create a store for a Redis URL.

        Args:
            url: Redis connection URL, e.g. ``redis://:secret@host:6379/1``
            prefix: Key prefix
            **pool_options: max_idle, max_active, idle_timeout, wait and
                connection keyword arguments; see :func:`create_pool`
        """
        return cls(create_pool(url, **pool_options), prefix=prefix)

    @classmethod
    def from_config(cls, config: Config) -> "PrefixedStore":
        """Create a store from a validated Config.

        The logging section is applied to the kvtools loggers first.
        """
        config.apply_logging()
        store = config.store
        return cls.from_url(
            store.url,
            prefix=store.prefix,
            max_idle=store.pool.max_idle,
            max_active=store.pool.max_active,
            idle_timeout=store.pool.idle_timeout_seconds,
            wait=store.pool.wait,
        )

    def execute(self, command: str, *args: Any) -> Any:
        """Send one command and return its raw reply.

        The command name is upper-cased before matching against the
        prefix-eligible set. The connection goes back to the pool whether
        or not the command succeeds.
        """
        command = command.upper()
        args = apply_prefix(self.prefix, command, args)

        with Timer() as t:
            with self.pool.connection() as conn:
                conn.send_command(command, *args)
                reply = conn.read_response()

        logger.debug("Command executed", context={"command": command}, duration_ms=t.duration_ms)
        emit_timer("kvtools.command.duration", t.duration_ms, {"command": command})
        return reply

    def _acknowledged(self, command: str, reply: Any) -> bool:
        if decode_string(reply) == OK:
            return True
        logger.warning("Write not acknowledged", context={"command": command, "reply": reply})
        raise NotAcknowledgedError(command, reply)

    # Keys and strings

    def type(self, key: str) -> str:
        """Return the type name stored at key ("none" if missing)."""
        return decode_string(self.execute("TYPE", key)) or "none"

    def keys(self, pattern: str) -> list[str]:
        """Return all keys matching pattern.

        KEYS is not prefix-eligible, so the pattern is matched against full
        key names, prefix included.
        """
        return decode_strings(self.execute("KEYS", pattern))

    def set(self, key: str, value: Any) -> bool:
        """Set key to value.

        Returns:
            True once the server acknowledges the write

        Raises:
            NotAcknowledgedError: the server replied with anything but OK
        """
        return self._acknowledged("SET", self.execute("SET", key, value))

    def get(self, key: str) -> str | None:
        """Return the value of key, or None if it does not exist."""
        return decode_string(self.execute("GET", key))

    def exists(self, key: str) -> bool:
        return decode_bool(self.execute("EXISTS", key))

    def delete(self, key: str) -> bool:
        """Delete key. Returns False if it did not exist."""
        return decode_bool(self.execute("DEL", key))

    def expire(self, key: str, seconds: int) -> bool:
        """Set a timeout on key in seconds. Returns False if key is missing."""
        return decode_bool(self.execute("EXPIRE", key, seconds))

    def ttl(self, key: str) -> int:
        """Remaining time to live of key in seconds.

        -1 means the key has no expiry and -2 that it does not exist.
        """
        return decode_int(self.execute("TTL", key))

    def ping(self) -> bool:
        return decode_string(self.execute("PING")) == PONG

    # Lists

    def rpush(self, key: str, *values: Any) -> int:
        """Append values to the list at key, in order. Returns the new length."""
        return decode_uint(self.execute("RPUSH", *key_with_values(key, values)))

    def lpop(self, key: str) -> str | None:
        return decode_string(self.execute("LPOP", key))

    def rpop(self, key: str) -> str | None:
        return decode_string(self.execute("RPOP", key))

    def llen(self, key: str) -> int:
        return decode_uint(self.execute("LLEN", key))

    def lrange(self, key: str, start: int, end: int) -> list[str]:
        """Return list elements from start to end, both inclusive."""
        return decode_strings(self.execute("LRANGE", key, start, end))

    # Sets

    def sadd(self, key: str, *members: Any) -> int:
        """Add members to the set at key. Returns how many were new."""
        return decode_uint(self.execute("SADD", *key_with_values(key, members)))

    def srem(self, key: str, *members: Any) -> int:
        """Remove members from the set at key. Returns how many were removed."""
        return decode_uint(self.execute("SREM", *key_with_values(key, members)))

    def sismember(self, key: str, member: Any) -> bool:
        return decode_bool(self.execute("SISMEMBER", key, member))

    def smembers(self, key: str) -> list[str]:
        return decode_strings(self.execute("SMEMBERS", key))

    def scard(self, key: str) -> int:
        return decode_uint(self.execute("SCARD", key))

    # Hashes

    def hset(self, name: str, field: str, value: Any) -> int:
        """Set a hash field. Returns 1 if the field is new, 0 if updated."""
        return decode_uint(self.execute("HSET", name, field, value))

    def hmset(self, name: str, mapping: Mapping[str, Any]) -> bool:
        """Set several hash fields at once.

        Acknowledged exactly like :meth:`set`: only an OK reply counts as
        success, there is no per-field result to inspect.
        """
        return self._acknowledged("HMSET", self.execute("HMSET", *key_with_mapping(name, mapping)))

    def hget(self, name: str, field: str) -> str | None:
        return decode_string(self.execute("HGET", name, field))

    def hgetall(self, name: str) -> dict[str, str]:
        return decode_string_map(self.execute("HGETALL", name))

    def hlen(self, name: str) -> int:
        return decode_uint(self.execute("HLEN", name))

    def hexists(self, name: str, field: str) -> bool:
        return decode_bool(self.execute("HEXISTS", name, field))

    def hvals(self, name: str) -> list[str]:
        return decode_strings(self.execute("HVALS", name))

    def hkeys(self, name: str) -> list[str]:
        return decode_strings(self.execute("HKEYS", name))

    def hdel(self, name: str, *fields: str) -> int:
        """Delete hash fields. Returns how many were removed."""
        return decode_uint(self.execute("HDEL", *key_with_values(name, fields)))

    # Transactions

    def begin_transaction(self) -> TransactionBatch:
        """Start a MULTI/EXEC batch.

        The batch holds one pooled connection until it is committed and
        keeps the prefix that was current when it was created.

        Example:
            batch = store.begin_transaction()
            batch.delete("stale")
            batch.rpush("queue", "job-1", "job-2")
            replies = batch.commit()
        """
        return TransactionBatch(self.pool, self.pool.get_connection(), self.prefix)

    def close(self) -> None:
        """Close the connection pool."""
        self.pool.close()

    def __enter__(self) -> "PrefixedStore":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"PrefixedStore(prefix={self.prefix!r}, pool={self.pool!r})"
