"""Database connection module for LearnHub."""

from learnhub.core.database.async_cassandra import (
    AsyncCassandraConnection,
    execute,
    init_async_cassandra,
    shutdown_async_cassandra,
)


__all__ = [
    "AsyncCassandraConnection",
    "execute",
    "init_async_cassandra",
    "shutdown_async_cassandra",
]
