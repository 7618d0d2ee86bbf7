"""Single-use MULTI/EXEC batches."""

from collections.abc import Mapping
from enum import Enum
from typing import TYPE_CHECKING, Any

from redis.exceptions import ExecAbortError, ResponseError

from kvtools.exceptions import BatchClosedError, TransactionError
from kvtools.observability import Timer, emit_counter, get_logger
from kvtools.store.commands import apply_prefix, key_with_mapping, key_with_values
from kvtools.store.reply import decode_values

if TYPE_CHECKING:
    from redis import Connection

    from kvtools.store.pool import IdlePolicy

logger = get_logger(__name__)


class BatchState(str, Enum):
    """Lifecycle of a TransactionBatch."""

    ACTIVE = "active"
    CLOSED = "closed"


class TransactionBatch:
    """Commands buffered on one connection and committed atomically.

    Created by :meth:`PrefixedStore.begin_transaction`. Commands are
    buffered client-side behind a MULTI and written together with EXEC on
    :meth:`commit`, so the server applies all of them as one step. A batch
    commits once; afterwards every call raises :class:`BatchClosedError`.

    Not thread-safe: a batch belongs to the code path that created it.
    """

    def __init__(self, pool: "IdlePolicy", conn: "Connection", prefix: str) -> None:
        """Initialize the batch.

        Args:
            pool: Pool the connection is returned to after commit
            conn: Borrowed connection, held until commit
            prefix: Key prefix captured from the store
        """
        self._pool = pool
        self._conn = conn
        self.prefix = prefix
        self.state = BatchState.ACTIVE
        self._commands: list[tuple[Any, ...]] = [("MULTI",)]

    @property
    def closed(self) -> bool:
        return self.state is BatchState.CLOSED

    def __len__(self) -> int:
        """Number of buffered commands, not counting MULTI."""
        return max(len(self._commands) - 1, 0)

    def send(self, command: str, *args: Any) -> None:
        """Buffer a command without waiting for a reply.

        Raises:
            BatchClosedError: the batch was already committed
        """
        if self.closed:
            raise BatchClosedError()
        command = command.upper()
        args = apply_prefix(self.prefix, command, args)
        self._commands.append((command, *args))

    def commit(self) -> list[Any]:
        """Send EXEC and return one reply per buffered command, in order.

        The batch is closed and its connection released even when the
        commit fails.

        Raises:
            BatchClosedError: the batch was already committed
            redis.exceptions.ResponseError: the first command the server
                rejected while queueing. Nothing was applied.
            TransactionError: a command failed during EXEC. The others were
                applied and their replies are on the error.
        """
        if self.closed:
            raise BatchClosedError()
        self.state = BatchState.CLOSED

        conn = self._conn
        count = len(self)
        try:
            with Timer() as t:
                replies = self._exec(conn)
        except ResponseError as e:
            self._pool.release(conn)
            logger.warning("Transaction failed", context={"commands": count}, error=e)
            emit_counter("kvtools.batch.failed")
            raise
        except BaseException as e:
            self._pool.release(conn, discard=True)
            logger.warning("Transaction failed", context={"commands": count}, error=e)
            emit_counter("kvtools.batch.failed")
            raise
        finally:
            self._commands.clear()

        self._pool.release(conn)
        logger.debug("Transaction committed", context={"commands": count}, duration_ms=t.duration_ms)
        emit_counter("kvtools.batch.committed")
        return replies

    def _exec(self, conn: "Connection") -> list[Any]:
        conn.send_packed_command(conn.pack_commands([*self._commands, ("EXEC",)]))

        # One status reply for MULTI and one QUEUED per command. All of them
        # must be read before EXEC's reply to keep the stream aligned.
        errors: list[ResponseError] = []
        for _ in self._commands:
            try:
                conn.read_response()
            except ResponseError as e:
                errors.append(e)

        try:
            reply = conn.read_response()
        except ExecAbortError:
            if errors:
                raise errors[0] from None
            raise

        replies = decode_values(reply)
        for item in replies:
            if isinstance(item, ResponseError):
                raise TransactionError(item, replies) from item
        return replies

    def discard(self) -> None:
        """Abandon the batch without executing anything.

        Nothing reaches the server before commit, so the held connection is
        returned to the pool as is. No-op when the batch is already closed.
        """
        if self.closed:
            return
        self.state = BatchState.CLOSED
        self._commands.clear()
        self._pool.release(self._conn)

    def __enter__(self) -> "TransactionBatch":
        return self

    def __exit__(self, exc_type: Any, *args: Any) -> None:
        if exc_type is not None:
            self.discard()
        elif not self.closed:
            self.commit()

    # Buffered writes

    def set(self, key: str, value: Any) -> None:
        self.send("SET", key, value)

    def delete(self, key: str) -> None:
        self.send("DEL", key)

    def expire(self, key: str, seconds: int) -> None:
        self.send("EXPIRE", key, seconds)

    def rpush(self, key: str, *values: Any) -> None:
        self.send("RPUSH", *key_with_values(key, values))

    def sadd(self, key: str, *members: Any) -> None:
        self.send("SADD", *key_with_values(key, members))

    def srem(self, key: str, *members: Any) -> None:
        self.send("SREM", *key_with_values(key, members))

    def hset(self, name: str, field: str, value: Any) -> None:
        self.send("HSET", name, field, value)

    def hmset(self, name: str, mapping: Mapping[str, Any]) -> None:
        self.send("HMSET", *key_with_mapping(name, mapping))

    def hdel(self, name: str, *fields: str) -> None:
        self.send("HDEL", *key_with_values(name, fields))

    def __repr__(self) -> str:
        return f"TransactionBatch(prefix={self.prefix!r}, state={self.state.value}, commands={len(self)})"
