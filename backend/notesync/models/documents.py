from typing import Any

from pydantic import BaseModel, Field


class DocumentIn(BaseModel):
    # values in their wire (tagged) form, see notesync.models.values
    fields: dict[str, Any] = Field(default_factory=dict)


class DocumentCreated(BaseModel):
    id: str


class DocumentOut(BaseModel):
    id: str
    fields: dict[str, Any]
