from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class ExtractionDraft:
    """Fields supplied by the caller when saving an OCR result."""

    user_id: str
    image_url: str
    extracted_text: str
    file_name: str | None = None

    def __post_init__(self) -> None:
        if not self.user_id:
            raise ValueError("user_id must not be empty")
        if not self.image_url:
            raise ValueError("image_url must not be empty")


@dataclass(frozen=True)
class ExtractionRecord:
    """Represents a persisted row from the ocr_results table.

    Only built from a complete row: id and created_at are assigned by the
    store and are never absent on an instance.
    """

    id: str
    user_id: str
    image_url: str
    extracted_text: str
    created_at: datetime
    file_name: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "ExtractionRecord":
        return cls(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            image_url=row["image_url"],
            extracted_text=row["extracted_text"] or "",
            created_at=row["created_at"],
            file_name=row.get("file_name"),
        )
