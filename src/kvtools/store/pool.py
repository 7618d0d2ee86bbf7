"""Connection pools with idle limits on top of redis-py's pools.

redis-py's ``ConnectionPool`` (fail fast) and ``BlockingConnectionPool``
(wait) handle borrowing and the cap on open connections. :class:`IdlePolicy`
adds the two limits they lack: at most ``max_idle`` parked connections stay
connected, and a parked connection is closed once it has been idle longer
than ``idle_timeout`` seconds. A closed connection stays in redis-py's free
list and reconnects when it is next borrowed.
"""

import threading
import time
from collections import OrderedDict
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import redis
from redis import Connection
from redis.connection import parse_url
from redis.exceptions import ConnectionError, ResponseError

from kvtools.exceptions import PoolClosedError, PoolExhaustedError
from kvtools.observability import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_IDLE = 5
DEFAULT_MAX_ACTIVE = 500
DEFAULT_IDLE_TIMEOUT = 300.0  # 5 minutes

# redis-py treats a missing max_connections as its own default, not as "no limit"
UNLIMITED = 2**31


class IdlePolicy:
    """Idle limits and a closed state for a redis-py connection pool.

    Mixed in ahead of a redis-py pool class; see :func:`create_pool`.
    """

    def __init__(
        self,
        *,
        max_idle: int = DEFAULT_MAX_IDLE,
        idle_timeout: float = DEFAULT_IDLE_TIMEOUT,
        **pool_kwargs: Any,
    ) -> None:
        """Initialize the pool.

        Args:
            max_idle: Maximum number of parked connections kept connected
            idle_timeout: Close parked connections after this many seconds
            **pool_kwargs: Passed to the redis-py pool
        """
        self.max_idle = max_idle
        self.idle_timeout = idle_timeout
        self._closed = False
        # Parked connections, oldest release first
        self._parked: OrderedDict[Connection, float] = OrderedDict()
        self._parked_lock = threading.Lock()
        super().__init__(**pool_kwargs)

    @property
    def idle_count(self) -> int:
        """Number of parked connections that are still connected."""
        with self._parked_lock:
            return len(self._parked)

    @property
    def closed(self) -> bool:
        return self._closed

    def get_connection(self, *args: Any, **options: Any) -> Connection:
        """Borrow a connection.

        Raises:
            PoolExhaustedError: the fail-fast pool is at max_connections
            PoolClosedError: the pool has been closed
        """
        if self._closed:
            raise PoolClosedError("connection pool closed")
        self._close_expired()

        conn = super().get_connection(*args, **options)
        with self._parked_lock:
            self._parked.pop(conn, None)

        # A waiter can be handed a connection released after close()
        if self._closed:
            self.release(conn)
            raise PoolClosedError("connection pool closed")

        # No-op unless trimming closed it after redis-py handed it out
        conn.connect()
        return conn

    def release(self, connection: Connection, discard: bool = False) -> None:
        """Return a borrowed connection.

        Args:
            connection: Connection obtained from get_connection()
            discard: Close the connection instead of parking it connected
        """
        if discard or self._closed:
            connection.disconnect()
            super().release(connection)
            return

        with self._parked_lock:
            self._parked[connection] = time.monotonic()
            self._parked.move_to_end(connection)
            while len(self._parked) > self.max_idle:
                oldest, _ = self._parked.popitem(last=False)
                oldest.disconnect()
        super().release(connection)

    @contextmanager
    def connection(self) -> Iterator[Connection]:
        """Borrow a connection for the duration of a ``with`` block.

        A connection is only kept connected if the block finished cleanly or
        ended with a complete error reply from the server; after any other
        failure the stream state is unknown and the connection is closed.
        """
        conn = self.get_connection()
        try:
            yield conn
        except ResponseError:
            self.release(conn)
            raise
        except BaseException:
            self.release(conn, discard=True)
            raise
        else:
            self.release(conn)

    def close(self) -> None:
        """Close parked connections and refuse further borrowing.

        Borrowed connections are closed as they are released.
        """
        self._closed = True
        with self._parked_lock:
            parked = list(self._parked)
            self._parked.clear()
        for conn in parked:
            conn.disconnect()
        logger.debug("Connection pool closed", context={"closed": len(parked)})

    def _close_expired(self) -> None:
        now = time.monotonic()
        with self._parked_lock:
            while self._parked:
                conn, released_at = next(iter(self._parked.items()))
                if now - released_at <= self.idle_timeout:
                    break
                del self._parked[conn]
                conn.disconnect()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(max_connections={self.max_connections}, "
            f"idle={self.idle_count}, max_idle={self.max_idle})"
        )


class ConnectionPool(IdlePolicy, redis.ConnectionPool):
    """Fails with PoolExhaustedError once max_connections are in use."""

    def make_connection(self) -> Connection:
        try:
            return super().make_connection()
        except ConnectionError as e:
            logger.warning(
                "Connection pool exhausted",
                context={"max_connections": self.max_connections},
            )
            raise PoolExhaustedError("connection pool exhausted") from e


class BlockingConnectionPool(IdlePolicy, redis.BlockingConnectionPool):
    """Waits for a connection to be released once max_connections are in use."""


def create_pool(
    url: str | None = None,
    *,
    max_idle: int = DEFAULT_MAX_IDLE,
    max_active: int = DEFAULT_MAX_ACTIVE,
    idle_timeout: float = DEFAULT_IDLE_TIMEOUT,
    wait: bool = True,
    **connection_kwargs: Any,
) -> IdlePolicy:
    """Create a pool for a ``redis://``, ``rediss://`` or ``unix://`` URL.

    Replies are decoded to ``str`` unless ``decode_responses`` is given.

    Args:
        url: Redis connection URL. Connection keyword arguments alone are
            used when omitted.
        max_idle: Maximum number of parked connections kept connected
        max_active: Maximum number of connections, 0 for no limit
        idle_timeout: Close parked connections after this many seconds
        wait: Block until a connection is released when max_active is
            reached instead of raising PoolExhaustedError. Without a limit
            there is nothing to wait for.
        **connection_kwargs: Passed to each connection, e.g.
            ``connection_class`` or ``socket_timeout``
    """
    if url is not None:
        connection_kwargs = {**parse_url(url), **connection_kwargs}
    connection_kwargs.setdefault("decode_responses", True)

    if wait and max_active:
        return BlockingConnectionPool(
            max_idle=max_idle,
            idle_timeout=idle_timeout,
            max_connections=max_active,
            timeout=None,
            **connection_kwargs,
        )
    return ConnectionPool(
        max_idle=max_idle,
        idle_timeout=idle_timeout,
        max_connections=max_active or UNLIMITED,
        **connection_kwargs,
    )
