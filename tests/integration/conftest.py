import os
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import psycopg
import pytest
from psycopg import sql

from ocr_app.config.settings import Settings
from ocr_app.database.connection import close_pool, get_connection, init_pool

SCHEMA_PATH = Path(__file__).resolve().parents[2] / "sql" / "schema.sql"


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "ocr_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute(SCHEMA_PATH.read_text())
            conn.commit()
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run.")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def user_id(integration_pool: None) -> Generator[str, None, None]:
    """A throwaway user id whose rows are deleted after the test."""
    value = f"it-{uuid.uuid4()}"
    yield value
    with get_connection() as conn:
        conn.execute("DELETE FROM ocr_results WHERE user_id = %s", (value,))
        conn.commit()


READER_ROLE = "ocr_rls_reader"
WRITER_ROLE = "ocr_rls_writer"


def _ensure_role(conn: psycopg.Connection[Any], role: str, privileges: str) -> None:
    conn.execute(
        sql.SQL(
            "DO $$ BEGIN "
            "IF NOT EXISTS (SELECT 1 FROM pg_roles WHERE rolname = {name}) "
            "THEN CREATE ROLE {role} NOLOGIN; END IF; END $$"
        ).format(name=sql.Literal(role), role=sql.Identifier(role))
    )
    conn.execute(
        sql.SQL("GRANT {privs} ON ocr_results TO {role}").format(
            privs=sql.SQL(privileges), role=sql.Identifier(role)
        )
    )
    conn.execute(
        sql.SQL(
            "GRANT EXECUTE ON FUNCTION insert_ocr_result(text, text, text, text) TO {role}"
        ).format(role=sql.Identifier(role))
    )
    conn.execute(sql.SQL("GRANT {role} TO CURRENT_USER").format(role=sql.Identifier(role)))


@pytest.fixture(scope="session")
def rls_roles(integration_pool: None) -> None:
    """Non-owner roles that row level security applies to.

    The reader may only SELECT, so its direct inserts are refused and writes
    go through insert_ocr_result. The writer may also INSERT.
    """
    try:
        with get_connection() as conn:
            _ensure_role(conn, READER_ROLE, "SELECT")
            _ensure_role(conn, WRITER_ROLE, "SELECT, INSERT")
            conn.commit()
    except psycopg.Error as e:
        pytest.skip(f"Cannot create restricted roles: {e}")


@contextmanager
def _pool_as_role(settings: Settings, role: str) -> Generator[None, None, None]:
    close_pool()
    init_pool(settings.model_copy(update={"db_role": role}))
    try:
        yield
    finally:
        close_pool()
        init_pool(settings)


@pytest.fixture
def as_reader(
    rls_roles: None, user_id: str, test_settings: Settings
) -> Generator[None, None, None]:
    with _pool_as_role(test_settings, READER_ROLE):
        yield


@pytest.fixture
def as_writer(
    rls_roles: None, user_id: str, test_settings: Settings
) -> Generator[None, None, None]:
    with _pool_as_role(test_settings, WRITER_ROLE):
        yield
