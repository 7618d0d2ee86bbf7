"""Pytest configuration and fixtures."""

import logging
from collections import deque
from typing import Any

import fakeredis
import pytest
import redis

from kvtools.store import PrefixedStore, create_pool


class RecordingConnection(redis.Connection):
    """Connection double that records what would go over the wire.

    Replies are served from a queue, one per read_response() call. Nothing
    touches the network; connect() and disconnect() only flip state.
    """

    def __init__(
        self,
        replies: list[Any] | None = None,
        created: list["RecordingConnection"] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.sent: list[tuple[Any, ...]] = []
        self.replies: deque[Any] = deque(replies or [])
        self.connected = False
        self.connects = 0
        if created is not None:
            created.append(self)

    @property
    def disconnected(self) -> bool:
        """Connected at least once and closed since."""
        return self.connects > 0 and not self.connected

    def connect(self) -> None:
        if not self.connected:
            self.connected = True
            self.connects += 1

    def disconnect(self, *args: Any, **kwargs: Any) -> None:
        self.connected = False

    def can_read(self, timeout: float | None = 0) -> bool:
        return False

    def send_command(self, *args: Any, **kwargs: Any) -> None:
        self.sent.append(args)

    def pack_commands(self, commands: Any) -> list[tuple[Any, ...]]:
        return [tuple(command) for command in commands]

    def send_packed_command(self, command: Any, check_health: bool = True) -> None:
        self.sent.extend(command)

    def read_response(self, *args: Any, **kwargs: Any) -> Any:
        reply = self.replies.popleft() if self.replies else "OK"
        if isinstance(reply, BaseException):
            raise reply
        return reply


@pytest.fixture
def recording_pool():
    """Factory for pools over recording connections.

    Returns (pool, created); each new connection is appended to created.
    """
    pools = []

    def make(replies: list[Any] | None = None, **options: Any):
        created: list[RecordingConnection] = []
        pool = create_pool(
            connection_class=RecordingConnection,
            replies=replies,
            created=created,
            **options,
        )
        pools.append(pool)
        return pool, created

    yield make
    for pool in pools:
        pool.close()


@pytest.fixture
def package_logger():
    """The kvtools logger, restored after the test."""
    logger = logging.getLogger("kvtools")
    level, handlers = logger.level, list(logger.handlers)
    yield logger
    logger.setLevel(level)
    logger.handlers[:] = handlers


@pytest.fixture
def sample_config_dict():
    """Sample configuration dictionary for testing."""
    return {
        "store": {
            "url": "redis://localhost:6379/2",
            "prefix": "app:",
            "pool": {"max_idle": 2, "max_active": 10, "idle_timeout_seconds": 60, "wait": False},
        },
        "logging": {"level": "DEBUG", "format": "text"},
    }


@pytest.fixture
def redis_server():
    """An in-process fake Redis server."""
    return fakeredis.FakeServer()


@pytest.fixture
def redis_client(redis_server):
    """Plain client on the fake server, for inspecting raw keys."""
    return fakeredis.FakeStrictRedis(server=redis_server, decode_responses=True)


@pytest.fixture
def pool(redis_server):
    """Connection pool backed by the fake server."""
    pool = create_pool(
        connection_class=fakeredis.FakeRedisConnection,
        server=redis_server,
        max_idle=2,
        max_active=4,
    )
    yield pool
    pool.close()


@pytest.fixture
def store(pool):
    """Store without a prefix."""
    return PrefixedStore(pool)


@pytest.fixture
def prefixed_store(pool):
    """Store with the "test:" prefix."""
    return PrefixedStore(pool, prefix="test:")


@pytest.fixture
def recording(recording_pool):
    """Factory for a store whose connections record outgoing commands.

    Returns (store, connections); each new connection is appended to the list.
    """
    def make(prefix: str = "", replies: list[Any] | None = None):
        pool, connections = recording_pool(replies)
        return PrefixedStore(pool, prefix=prefix), connections

    return make
