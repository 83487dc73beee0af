"""Contract between the note synchronizer and a remote document store.

Any object with these three coroutines can back a synchronizer: the HTTP
client in :mod:`notesync.client.http_store` in production, an in-memory fake
in tests. Calls are independent; there is no transaction spanning them.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence


class Direction(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class Document:
    id: str
    fields: dict[str, Any] = field(default_factory=dict)


class RemoteStore(Protocol):
    async def add_document(self, collection: str, fields: dict[str, Any]) -> str:
        """Persist a new document and return its store-assigned id.

        Raises StoreWriteError.
        """
        ...

    async def list_documents(
        self, collection: str, order_by: str, direction: Direction
    ) -> Sequence[Document]:
        """Return every document of ``collection`` ordered by ``order_by``.

        Raises StoreReadError.
        """
        ...

    async def delete_document(self, collection: str, document_id: str) -> None:
        """Remove a document. Raises StoreWriteError."""
        ...
