"""HTTP client for the notes document store service."""
from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from notesync.client.errors import StoreReadError, StoreWriteError
from notesync.client.remote_store import Direction, Document
from notesync.models.values import decode_fields, encode_fields
from notesync.utils import settings

logger = logging.getLogger(__name__)


def _collection_path(collection: str) -> str:
    return f"/collections/{quote(collection, safe='')}/documents"


def _detail(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        # not JSON, or not decodable text
        return response.reason_phrase
    if isinstance(payload, dict) and payload.get("detail"):
        return str(payload["detail"])
    return response.reason_phrase


class HttpDocumentStore:
    """:class:`~notesync.client.remote_store.RemoteStore` over HTTP."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.store_url(),
            timeout=timeout if timeout is not None else settings.timeout_seconds(),
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "HttpDocumentStore":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def add_document(self, collection: str, fields: dict[str, Any]) -> str:
        try:
            response = await self._client.post(
                _collection_path(collection), json={"fields": encode_fields(fields)}
            )
        except httpx.HTTPError as exc:
            raise StoreWriteError(f"Could not add document to {collection}: {exc}") from exc
        if response.status_code != 201:
            raise StoreWriteError(_detail(response), status_code=response.status_code)
        try:
            return str(response.json()["id"])
        except (ValueError, KeyError, TypeError) as exc:
            raise StoreWriteError("Malformed add response") from exc

    async def list_documents(
        self, collection: str, order_by: str, direction: Direction = Direction.ASC
    ) -> list[Document]:
        params = {"order_by": order_by, "direction": Direction(direction).value}
        try:
            response = await self._client.get(_collection_path(collection), params=params)
        except httpx.HTTPError as exc:
            raise StoreReadError(f"Could not list {collection}: {exc}") from exc
        if response.status_code != 200:
            raise StoreReadError(_detail(response), status_code=response.status_code)
        try:
            payload = response.json()
        except ValueError as exc:
            raise StoreReadError("Malformed list response") from exc
        if not isinstance(payload, list):
            raise StoreReadError("Malformed list response")

        out: list[Document] = []
        for item in payload:
            if not isinstance(item, dict) or "id" not in item:
                raise StoreReadError("Malformed list response")
            fields = item.get("fields") or {}
            if not isinstance(fields, dict):
                raise StoreReadError("Malformed list response")
            try:
                out.append(Document(id=str(item["id"]), fields=decode_fields(fields)))
            except (ValueError, TypeError) as exc:
                raise StoreReadError("Malformed list response") from exc
        return out

    async def delete_document(self, collection: str, document_id: str) -> None:
        url = f"{_collection_path(collection)}/{quote(document_id, safe='')}"
        try:
            response = await self._client.delete(url)
        except httpx.HTTPError as exc:
            raise StoreWriteError(f"Could not delete {document_id}: {exc}") from exc
        if response.status_code == 404:
            # already gone
            logger.debug("Document %s was not found in %s", document_id, collection)
            return
        if response.status_code not in (200, 204):
            raise StoreWriteError(_detail(response), status_code=response.status_code)
