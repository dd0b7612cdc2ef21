from collections.abc import Callable, Generator
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg import sql
from psycopg.conninfo import make_conninfo
from psycopg_pool import ConnectionPool

from ocr_app.config.settings import Settings

_pool: ConnectionPool | None = None


def build_conninfo(settings: Settings) -> str:
    """Render a libpq connection string from the db_* settings."""
    return make_conninfo(
        host=settings.db_host,
        port=settings.db_port,
        dbname=settings.db_database,
        user=settings.db_username,
        password=settings.db_password,
    )


def _role_configurer(role: str) -> Callable[[psycopg.Connection[Any]], None]:
    def configure(conn: psycopg.Connection[Any]) -> None:
        conn.execute(sql.SQL("SET ROLE {}").format(sql.Identifier(role)))
        conn.commit()

    return configure


def init_pool(settings: Settings) -> None:
    """Open the process-wide connection pool for the relational store.

    When db_role is set, every pooled connection switches to that role so
    row level security applies to the application's statements.
    """
    global _pool  # noqa: PLW0603
    if _pool is not None:
        return
    configure = _role_configurer(settings.db_role) if settings.db_role else None
    _pool = ConnectionPool(
        build_conninfo(settings),
        min_size=1,
        max_size=5,
        open=True,
        name="ocr_results",
        configure=configure,
    )


def close_pool() -> None:
    global _pool  # noqa: PLW0603
    if _pool is not None:
        _pool.close()
        _pool = None


@contextmanager
def get_connection() -> Generator[psycopg.Connection[Any], None, None]:
    """Yield a pooled connection. The caller commits; errors roll back."""
    if _pool is None:
        raise RuntimeError("Connection pool not initialized. Call init_pool() first.")
    with _pool.connection() as conn:
        yield conn


def bind_user(cur: psycopg.Cursor[Any], user_id: str) -> None:
    """Set app.user_id for the current transaction; the RLS policy keys on it."""
    cur.execute("SELECT set_config('app.user_id', %s, true)", (user_id,))
