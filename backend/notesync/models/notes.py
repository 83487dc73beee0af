from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Union

from pydantic import BaseModel, field_validator

from notesync.models.values import SERVER_TIMESTAMP

TITLE_FIELD = "title"
CONTENT_FIELD = "content"
CREATED_AT_FIELD = "createdAt"


@dataclass(frozen=True)
class Pending:
    """The store has not assigned the commit timestamp yet."""


@dataclass(frozen=True)
class Committed:
    instant: datetime


Timestamp = Union[Pending, Committed]

PENDING = Pending()


def timestamp_from_value(value: Any) -> Timestamp:
    # absent, null and a not-yet-resolved sentinel all read as pending
    if isinstance(value, datetime):
        return Committed(value)
    return PENDING


@dataclass(frozen=True)
class Note:
    id: str
    title: str
    content: str
    created_at: Timestamp = PENDING

    @classmethod
    def from_fields(cls, doc_id: str, fields: dict[str, Any]) -> "Note":
        return cls(
            id=doc_id,
            title=str(fields.get(TITLE_FIELD) or ""),
            content=str(fields.get(CONTENT_FIELD) or ""),
            created_at=timestamp_from_value(fields.get(CREATED_AT_FIELD)),
        )


class NoteCreate(BaseModel):
    title: str
    content: str

    @field_validator("title", "content")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value

    def to_fields(self) -> dict[str, Any]:
        return {
            TITLE_FIELD: self.title,
            CONTENT_FIELD: self.content,
            CREATED_AT_FIELD: SERVER_TIMESTAMP,
        }


@dataclass
class NoteDraft:
    """Input the user has typed but not submitted yet."""

    title: str = ""
    content: str = ""

    def clear(self) -> None:
        self.title = ""
        self.content = ""
