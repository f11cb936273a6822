from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg_pool import ConnectionPool

from sentinel.config.settings import Settings


def build_conninfo(settings: Settings) -> str:
    return (
        f"host={settings.db_host} "
        f"port={settings.db_port} "
        f"dbname={settings.db_database} "
        f"user={settings.db_username} "
        f"password={settings.db_password}"
    )


class Database:
    """Owns one connection pool with an explicit open/close lifecycle."""

    def __init__(self, settings: Settings) -> None:
        self._conninfo = build_conninfo(settings)
        self._connect_timeout = settings.db_connect_timeout_seconds
        self._pool: ConnectionPool | None = None

    def open(self) -> None:
        """Open the pool and wait until at least one connection is ready."""
        if self._pool is not None:
            return
        pool = ConnectionPool(self._conninfo, min_size=1, max_size=10, open=True)
        try:
            pool.wait(timeout=self._connect_timeout)
        except Exception:
            pool.close()
            raise
        self._pool = pool

    def close(self) -> None:
        if self._pool is not None:
            self._pool.close()
            self._pool = None

    @contextmanager
    def connection(self) -> Generator[psycopg.Connection[Any], None, None]:
        """Yield a connection from the pool. Caller manages commit/rollback."""
        if self._pool is None:
            raise RuntimeError("Database is not open. Call open() first.")
        with self._pool.connection() as conn:
            yield conn
