"""Redis store with key prefixing and MULTI/EXEC batches."""

from kvtools.store.client import PrefixedStore
from kvtools.store.commands import PREFIXED_COMMANDS, apply_prefix, key_with_values
from kvtools.store.pool import BlockingConnectionPool, ConnectionPool, IdlePolicy, create_pool
from kvtools.store.transaction import BatchState, TransactionBatch

__all__ = [
    "BatchState",
    "BlockingConnectionPool",
    "ConnectionPool",
    "IdlePolicy",
    "PREFIXED_COMMANDS",
    "PrefixedStore",
    "TransactionBatch",
    "apply_prefix",
    "create_pool",
    "key_with_values",
]
