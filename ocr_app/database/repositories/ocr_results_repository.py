from typing import Literal

import psycopg
from psycopg.rows import dict_row

from ocr_app.database.connection import bind_user, get_connection
from ocr_app.database.exceptions import PersistenceFailedError, RecordNotFoundError
from ocr_app.database.models import ExtractionDraft, ExtractionRecord
from ocr_app.database.writers import BaseRecordWriter
from ocr_app.logging.logger import Log

ReadErrorPolicy = Literal["empty", "propagate"]


class OcrResultsRepository:
    """Database operations for the ocr_results table."""

    def __init__(
        self,
        writer: BaseRecordWriter,
        read_error_policy: ReadErrorPolicy = "empty",
    ) -> None:
        if read_error_policy not in ("empty", "propagate"):
            raise ValueError(f"Unknown read error policy '{read_error_policy}'")
        self._writer = writer
        self._read_error_policy = read_error_policy

    def save(self, draft: ExtractionDraft) -> ExtractionRecord:
        """Persist an OCR result and return the stored row.

        Raises:
            PersistenceFailedError: if every write strategy failed.
        """
        record = self._writer.write(draft)
        Log.info("Saved OCR result", record_id=record.id, user_id=record.user_id)
        return record

    def list_by_user(self, user_id: str) -> list[ExtractionRecord]:
        """Return the user's OCR results, newest first.

        With the "empty" policy any store error yields an empty list so that
        history views never fail on a read. With "propagate" the error is
        raised as PersistenceFailedError.
        """
        try:
            return self._select_by_user(user_id)
        except Exception as exc:
            if self._read_error_policy == "propagate":
                raise PersistenceFailedError(
                    f"Failed to fetch OCR results: {exc}"
                ) from exc
            Log.error("Error fetching OCR results", user_id=user_id, reason=exc)
            return []

    def find_by_id(self, record_id: str, user_id: str) -> ExtractionRecord:
        """Find one of the user's OCR results by ID.

        Raises:
            RecordNotFoundError: if the user has no result with this ID.
            PersistenceFailedError: if the store could not be read.
        """
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    bind_user(cur, user_id)
                    cur.execute(
                        """
                        SELECT id, user_id, image_url, extracted_text, file_name, created_at
                        FROM ocr_results
                        WHERE id::text = %s AND user_id = %s
                        """,
                        (record_id, user_id),
                    )
                    row = cur.fetchone()
        except psycopg.Error as exc:
            raise PersistenceFailedError(f"Failed to fetch OCR result: {exc}") from exc

        if row is None:
            raise RecordNotFoundError(f"OCR result {record_id} not found")
        return ExtractionRecord.from_row(row)

    def _select_by_user(self, user_id: str) -> list[ExtractionRecord]:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                bind_user(cur, user_id)
                cur.execute(
                    """
                    SELECT id, user_id, image_url, extracted_text, file_name, created_at
                    FROM ocr_results
                    WHERE user_id = %s
                    ORDER BY created_at DESC
                    """,
                    (user_id,),
                )
                rows = cur.fetchall()
        return [ExtractionRecord.from_row(row) for row in rows]
