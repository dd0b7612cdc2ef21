import itertools
import threading
import uuid
from collections.abc import Callable, Generator
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Any

import psycopg
import pytest


class FakeOcrResultsStore:
    """In-memory stand-in for the ocr_results table and insert_ocr_result.

    Understands only the statements issued by the writers and the repository.
    When reject_direct_insert is set, plain INSERTs fail the way a missing
    privilege rejects them. With enforce_rls, rows are only insertable and
    visible for the user bound by set_config('app.user_id') on the same
    connection, like the owner policy in sql/schema.sql; the procedure
    bypasses it. A barrier, if given, is awaited right after each procedure
    insert so concurrent callers can be interleaved.
    """

    BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __init__(
        self,
        reject_direct_insert: bool = False,
        barrier: threading.Barrier | None = None,
        enforce_rls: bool = False,
    ) -> None:
        self.rows: list[dict[str, Any]] = []
        self.statements: list[str] = []
        self._reject_direct_insert = reject_direct_insert
        self._barrier = barrier
        self._enforce_rls = enforce_rls
        self._lock = threading.Lock()
        self._ticks = itertools.count()

    @contextmanager
    def connection(self) -> Generator["_FakeConnection", None, None]:
        yield _FakeConnection(self)

    def execute(
        self, conn: "_FakeConnection", sql: str, params: tuple[Any, ...]
    ) -> list[Any]:
        self.statements.append(sql)
        if "set_config('app.user_id'" in sql:
            conn.bound_user = params[0]
            return [(params[0],)]
        if "INSERT INTO ocr_results" in sql:
            if self._reject_direct_insert:
                raise psycopg.errors.InsufficientPrivilege("permission denied for table ocr_results")
            if self._enforce_rls and conn.bound_user != params[0]:
                raise psycopg.errors.InsufficientPrivilege(
                    'new row violates row-level security policy for table "ocr_results"'
                )
            return [self._add_row(*params)]
        if "insert_ocr_result" in sql:
            row = self._add_row(*params)
            if self._barrier is not None:
                self._barrier.wait(timeout=5)
            return [(row["id"],)]
        if "FROM ocr_results" in sql:
            with self._lock:
                rows = [dict(r) for r in self.rows]
            if self._enforce_rls:
                rows = [r for r in rows if r["user_id"] == conn.bound_user]
            if "id::text = %s" in sql:
                record_id, user_id = params
                return [r for r in rows if r["id"] == record_id and r["user_id"] == user_id]
            rows = [r for r in rows if r["user_id"] == params[0]]
            rows.sort(key=lambda r: r["created_at"], reverse=True)
            return rows[:1] if "LIMIT 1" in sql else rows
        raise AssertionError(f"unexpected statement: {sql}")

    def _add_row(
        self, user_id: str, image_url: str, extracted_text: str, file_name: str | None
    ) -> dict[str, Any]:
        with self._lock:
            row = {
                "id": str(uuid.uuid4()),
                "user_id": user_id,
                "image_url": image_url,
                "extracted_text": extracted_text,
                "file_name": file_name,
                "created_at": self.BASE_TIME + timedelta(seconds=next(self._ticks)),
            }
            self.rows.append(row)
        return dict(row)


class _FakeConnection:
    def __init__(self, store: FakeOcrResultsStore) -> None:
        self._store = store
        self.bound_user: str | None = None

    def cursor(self, row_factory: object = None) -> "_FakeCursor":
        return _FakeCursor(self._store, self)

    def commit(self) -> None:
        pass


class _FakeCursor:
    def __init__(self, store: FakeOcrResultsStore, conn: _FakeConnection) -> None:
        self._store = store
        self._conn = conn
        self._result: list[Any] = []

    def __enter__(self) -> "_FakeCursor":
        return self

    def __exit__(self, *exc_info: object) -> bool:
        return False

    def execute(self, sql: str, params: tuple[Any, ...]) -> None:
        self._result = self._store.execute(self._conn, sql, params)

    def fetchone(self) -> Any:
        return self._result[0] if self._result else None

    def fetchall(self) -> list[Any]:
        return list(self._result)


@pytest.fixture()
def install_fake_store(
    monkeypatch: pytest.MonkeyPatch,
) -> Callable[..., FakeOcrResultsStore]:
    """Patch every get_connection user with a fresh FakeOcrResultsStore."""

    def _install(**kwargs: Any) -> FakeOcrResultsStore:
        store = FakeOcrResultsStore(**kwargs)
        monkeypatch.setattr("ocr_app.database.writers.get_connection", store.connection)
        monkeypatch.setattr(
            "ocr_app.database.repositories.ocr_results_repository.get_connection",
            store.connection,
        )
        return store

    return _install


@pytest.fixture()
def png_bytes() -> bytes:
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
