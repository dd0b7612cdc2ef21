"""Write strategies for the ocr_results table.

The direct insert runs under the caller's row level security context. When
the store rejects it, the privileged ``insert_ocr_result`` procedure performs
the same logical write and the server-assigned fields are recovered with a
follow-up read of the user's newest row.

That follow-up read is not tied to the procedure call: a concurrent insert
for the same user between the two statements can be returned instead.
"""

from abc import ABC, abstractmethod

import psycopg
from psycopg.rows import dict_row

from ocr_app.database.connection import bind_user, get_connection
from ocr_app.database.exceptions import PersistenceFailedError, PersistenceRejectedError
from ocr_app.database.models import ExtractionDraft, ExtractionRecord
from ocr_app.logging.logger import Log


class BaseRecordWriter(ABC):
    """Contract for a single strategy that persists an ExtractionDraft."""

    @abstractmethod
    def write(self, draft: ExtractionDraft) -> ExtractionRecord:
        """Persist the draft and return the complete stored row.

        Raises:
            PersistenceRejectedError: if the store refused the write and
                another strategy may still succeed.
            PersistenceFailedError: if the write failed for good.
        """


class DirectInsertWriter(BaseRecordWriter):
    """Plain INSERT ... RETURNING under the caller's access rules."""

    def write(self, draft: ExtractionDraft) -> ExtractionRecord:
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    bind_user(cur, draft.user_id)
                    cur.execute(
                        """
                        INSERT INTO ocr_results
                            (user_id, image_url, extracted_text, file_name)
                        VALUES (%s, %s, %s, %s)
                        RETURNING id, user_id, image_url, extracted_text, file_name, created_at
                        """,
                        (
                            draft.user_id,
                            draft.image_url,
                            draft.extracted_text,
                            draft.file_name,
                        ),
                    )
                    row = cur.fetchone()
                conn.commit()
        except psycopg.Error as exc:
            raise PersistenceRejectedError(f"Insert rejected: {exc}") from exc

        if row is None:
            raise PersistenceRejectedError("Insert returned no row")
        return ExtractionRecord.from_row(row)


class PrivilegedProcedureWriter(BaseRecordWriter):
    """Calls insert_ocr_result, then reads back the user's newest row."""

    def write(self, draft: ExtractionDraft) -> ExtractionRecord:
        self._call_procedure(draft)
        return self._fetch_latest(draft.user_id)

    def _call_procedure(self, draft: ExtractionDraft) -> None:
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        "SELECT insert_ocr_result(%s, %s, %s, %s)",
                        (
                            draft.user_id,
                            draft.image_url,
                            draft.extracted_text,
                            draft.file_name,
                        ),
                    )
                    row = cur.fetchone()
                conn.commit()
        except psycopg.Error as exc:
            raise PersistenceFailedError(f"Database error: {exc}") from exc

        if row is None or not row[0]:
            raise PersistenceFailedError("Failed to save OCR result")

    def _fetch_latest(self, user_id: str) -> ExtractionRecord:
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    bind_user(cur, user_id)
                    cur.execute(
                        """
                        SELECT id, user_id, image_url, extracted_text, file_name, created_at
                        FROM ocr_results
                        WHERE user_id = %s
                        ORDER BY created_at DESC
                        LIMIT 1
                        """,
                        (user_id,),
                    )
                    row = cur.fetchone()
        except psycopg.Error as exc:
            raise PersistenceFailedError(
                f"Failed to retrieve saved OCR result: {exc}"
            ) from exc

        if row is None:
            raise PersistenceFailedError(
                "Failed to retrieve saved OCR result: no row found"
            )
        return ExtractionRecord.from_row(row)


class FallbackRecordWriter(BaseRecordWriter):
    """Runs the primary strategy and hands rejected writes to the recovery one."""

    def __init__(self, primary: BaseRecordWriter, recovery: BaseRecordWriter) -> None:
        self._primary = primary
        self._recovery = recovery

    def write(self, draft: ExtractionDraft) -> ExtractionRecord:
        try:
            return self._primary.write(draft)
        except PersistenceRejectedError as exc:
            Log.warning(
                "Primary insert rejected, using privileged procedure",
                user_id=draft.user_id,
                reason=exc,
            )
        return self._recovery.write(draft)
