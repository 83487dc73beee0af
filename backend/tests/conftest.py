import asyncio
import importlib
import itertools
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from notesync.client.errors import StoreReadError, StoreWriteError
from notesync.client.remote_store import Direction, Document
from notesync.models.values import SERVER_TIMESTAMP

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeDocumentStore:
    """In-memory RemoteStore with switches for failures, pending timestamps and slow reads."""

    def __init__(self):
        self.collections: dict[str, dict[str, dict]] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_on: set[str] = set()
        # keep SERVER_TIMESTAMP unresolved until commit_pending() is called
        self.hold_timestamps = False
        # each list call pops one gate (if any) and waits on it before answering
        self.list_gates: list[asyncio.Event] = []
        self._ids = itertools.count(1)
        self._ticks = itertools.count(1)

    def _now(self) -> datetime:
        return BASE_TIME + timedelta(seconds=next(self._ticks))

    def seed(self, collection, fields, doc_id=None) -> str:
        doc_id = doc_id or f"doc-{next(self._ids)}"
        self.collections.setdefault(collection, {})[doc_id] = dict(fields)
        return doc_id

    def commit_pending(self):
        for docs in self.collections.values():
            for fields in docs.values():
                for key, value in list(fields.items()):
                    if value is SERVER_TIMESTAMP:
                        fields[key] = self._now()

    async def add_document(self, collection, fields):
        self.calls.append(("add", collection))
        if "add" in self.fail_on:
            raise StoreWriteError("permission denied", status_code=403)
        stored = dict(fields)
        if not self.hold_timestamps:
            stored = {k: (self._now() if v is SERVER_TIMESTAMP else v) for k, v in stored.items()}
        return self.seed(collection, stored)

    async def list_documents(self, collection, order_by, direction=Direction.ASC):
        self.calls.append(("list", collection))
        gate = self.list_gates.pop(0) if self.list_gates else None
        if "list" in self.fail_on:
            raise StoreReadError("network unreachable")

        def key(item):
            value = item[1].get(order_by)
            if value is None or value is SERVER_TIMESTAMP:
                return (1, BASE_TIME)
            return (0, value)

        items = sorted(self.collections.get(collection, {}).items(), key=key)
        if direction == Direction.DESC:
            items.reverse()
        # pending sentinels read back as null
        snapshot = [
            Document(id=doc_id, fields={k: (None if v is SERVER_TIMESTAMP else v) for k, v in fields.items()})
            for doc_id, fields in items
        ]
        if gate is not None:
            await gate.wait()
        return snapshot

    async def delete_document(self, collection, document_id):
        self.calls.append(("delete", collection))
        if "delete" in self.fail_on:
            raise StoreWriteError("server unavailable", status_code=503)
        self.collections.get(collection, {}).pop(document_id, None)

    def count(self, kind):
        return sum(1 for c, _ in self.calls if c == kind)


@pytest.fixture()
def store():
    return FakeDocumentStore()


@pytest.fixture()
def app(tmp_path, monkeypatch):
    # isolate data dir per test
    monkeypatch.setenv("APP_DATA_DIR", str(tmp_path))

    # reload modules so that the router picks up the new data dir
    import notesync.api.documents
    import notesync.main
    importlib.reload(notesync.api.documents)
    importlib.reload(notesync.main)

    return notesync.main.app


@pytest.fixture()
def client(app):
    return TestClient(app)
