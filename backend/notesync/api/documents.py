import logging
import uuid
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query

from notesync.models.documents import DocumentCreated, DocumentIn, DocumentOut
from notesync.models.values import decode_fields
from notesync.storage.document_store import CorruptDocumentError, FileDocumentStore, StoredDocument
from notesync.storage.event_log import Event, EventLog
from notesync.utils import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/collections/{collection}/documents", tags=["documents"])

DATA_DIR = settings.data_dir()
store = FileDocumentStore(DATA_DIR)
event_log = EventLog(DATA_DIR)


def _out(doc: StoredDocument) -> DocumentOut:
    raw = doc.to_dict()
    return DocumentOut(id=raw["id"], fields=raw["fields"])


@router.post("", response_model=DocumentCreated, status_code=201)
def add_document(collection: str, payload: DocumentIn) -> DocumentCreated:
    try:
        fields = decode_fields(payload.fields)
        doc = store.add_document(collection, fields)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    event_log.emit(Event(
        event_type="DOCUMENT_ADDED",
        collection=collection,
        document_id=str(doc.id),
        meta={"fields": sorted(doc.fields)},
    ))
    logger.info("Added document %s to %s", doc.id, collection)

    return DocumentCreated(id=str(doc.id))


@router.get("", response_model=list[DocumentOut])
def list_documents(
    collection: str,
    order_by: str | None = Query(default=None, min_length=1),
    direction: Literal["asc", "desc"] = "asc",
) -> list[DocumentOut]:
    try:
        docs = store.list_documents(collection, order_by=order_by, descending=direction == "desc")
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return [_out(d) for d in docs]


@router.get("/{document_id}", response_model=DocumentOut)
def get_document(collection: str, document_id: UUID) -> DocumentOut:
    try:
        doc = store.get_document(collection, uuid.UUID(str(document_id)))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except CorruptDocumentError as exc:
        logger.error("Cannot read document %s from %s: %s", document_id, collection, exc.__cause__)
        raise HTTPException(status_code=500, detail="Document is unreadable")
    if doc is None:
        raise HTTPException(status_code=404, detail="Document not found")
    return _out(doc)


# idempotent: deleting a missing document still answers 204
@router.delete("/{document_id}", status_code=204)
def delete_document(collection: str, document_id: UUID) -> None:
    try:
        removed = store.delete_document(collection, uuid.UUID(str(document_id)))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    if removed:
        event_log.emit(Event(
            event_type="DOCUMENT_DELETED",
            collection=collection,
            document_id=str(document_id),
        ))
        logger.info("Deleted document %s from %s", document_id, collection)

    return None
