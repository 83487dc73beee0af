import json
import logging
import os
import re
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

from notesync.models.values import decode_fields, encode_fields, resolve_server_timestamps, utc_now

logger = logging.getLogger(__name__)

_COLLECTION_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


class CorruptDocumentError(Exception):
    """A stored document file exists but cannot be parsed."""


def _safe_collection_dir(base_dir: Path, collection: str) -> Path:
    # collection names end up in paths; keep them to a plain identifier
    if not collection or not _COLLECTION_RE.match(collection):
        raise ValueError("Invalid collection name")
    return base_dir / "collections" / collection


def _documents_dir(base_dir: Path, collection: str) -> Path:
    return _safe_collection_dir(base_dir, collection) / "documents"


def _document_path(base_dir: Path, collection: str, doc_id: uuid.UUID) -> Path:
    return _documents_dir(base_dir, collection) / f"{doc_id}.json"


def _atomic_write_json(path: Path, data: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
        f.flush()
        os.fsync(f.fileno())
    tmp_path.replace(path)


def _sort_key(value: Any) -> tuple:
    # missing/null first in ascending order; values grouped by type so that
    # mixed-type fields never compare across types
    if value is None:
        return (0,)
    if isinstance(value, bool):
        return (1, "bool", value)
    if isinstance(value, (int, float)):
        return (1, "number", value)
    if isinstance(value, (dict, list)):
        return (1, "json", json.dumps(value, sort_keys=True, default=str))
    return (1, type(value).__name__, value)


@dataclass(frozen=True)
class StoredDocument:
    id: uuid.UUID
    collection: str
    fields: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "collection": self.collection,
            "fields": encode_fields(self.fields),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "StoredDocument":
        return cls(
            id=uuid.UUID(raw["id"]),
            collection=raw["collection"],
            fields=decode_fields(raw.get("fields") or {}),
        )


class FileDocumentStore:
    """Schema-less document collections kept as one JSON file per document."""

    def __init__(self, base_dir: Path, clock: Callable[[], datetime] = utc_now):
        self.base_dir = base_dir
        self._clock = clock

    def add_document(self, collection: str, fields: dict[str, Any]) -> StoredDocument:
        doc_id = uuid.uuid4()
        committed = resolve_server_timestamps(fields, self._clock())
        doc = StoredDocument(id=doc_id, collection=collection, fields=committed)
        _atomic_write_json(_document_path(self.base_dir, collection, doc_id), doc.to_dict())
        return doc

    def get_document(self, collection: str, doc_id: uuid.UUID) -> StoredDocument | None:
        path = _document_path(self.base_dir, collection, doc_id)
        if not path.exists():
            return None
        try:
            return StoredDocument.from_dict(json.loads(path.read_text(encoding="utf-8")))
        except (ValueError, KeyError, TypeError) as exc:
            raise CorruptDocumentError(f"Document {doc_id} is unreadable") from exc

    def list_documents(
        self,
        collection: str,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[StoredDocument]:
        docs_dir = _documents_dir(self.base_dir, collection)
        if not docs_dir.exists():
            return []
        out: list[StoredDocument] = []
        for p in sorted(docs_dir.glob("*.json")):
            try:
                out.append(StoredDocument.from_dict(json.loads(p.read_text(encoding="utf-8"))))
            except (OSError, ValueError, KeyError, TypeError) as exc:
                logger.warning("Skipping unreadable document %s: %s", p.name, exc)
                continue
        if order_by:
            # stable sort: ties keep id order
            out.sort(key=lambda d: _sort_key(d.fields.get(order_by)), reverse=descending)
        return out

    def delete_document(self, collection: str, doc_id: uuid.UUID) -> bool:
        path = _document_path(self.base_dir, collection, doc_id)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True
