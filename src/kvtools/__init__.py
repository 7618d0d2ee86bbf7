"""kvtools - Prefixed Redis store with atomic batches, plus small utilities."""

from kvtools.config import Config, PoolConfig, StoreConfig
from kvtools.exceptions import (
    BatchClosedError,
    ConfigError,
    DecodeError,
    KVToolsError,
    NotAcknowledgedError,
    PoolClosedError,
    PoolExhaustedError,
    StoreError,
    TransactionError,
)
from kvtools.observability import (
    LogLevel,
    StructuredLogger,
    Timer,
    configure_logging,
    emit_counter,
    emit_timer,
    get_logger,
    register_metric_callback,
    unregister_metric_callback,
)
from kvtools.store import (
    PREFIXED_COMMANDS,
    BatchState,
    BlockingConnectionPool,
    ConnectionPool,
    IdlePolicy,
    PrefixedStore,
    TransactionBatch,
    create_pool,
)

__version__ = "0.1.0"
__all__ = [
    # Config
    "Config",
    "PoolConfig",
    "StoreConfig",
    # Store
    "BatchState",
    "BlockingConnectionPool",
    "ConnectionPool",
    "IdlePolicy",
    "PREFIXED_COMMANDS",
    "PrefixedStore",
    "TransactionBatch",
    "create_pool",
    # Errors
    "BatchClosedError",
    "ConfigError",
    "DecodeError",
    "KVToolsError",
    "NotAcknowledgedError",
    "PoolClosedError",
    "PoolExhaustedError",
    "StoreError",
    "TransactionError",
    # Observability
    "LogLevel",
    "StructuredLogger",
    "Timer",
    "configure_logging",
    "emit_counter",
    "emit_timer",
    "get_logger",
    "register_metric_callback",
    "unregister_metric_callback",
]
