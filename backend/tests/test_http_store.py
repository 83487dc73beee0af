import asyncio
from datetime import datetime

import httpx
import pytest

from notesync.client.errors import StoreReadError, StoreWriteError
from notesync.client.http_store import HttpDocumentStore
from notesync.client.remote_store import Direction
from notesync.models.values import SERVER_TIMESTAMP
from notesync.sync.errors import CreateFailed, LoadFailed
from notesync.sync.synchronizer import NoteSynchronizer


def _store_for(app):
    return HttpDocumentStore(base_url="http://testserver", transport=httpx.ASGITransport(app=app))


def test_round_trip_through_the_service(app):
    async def scenario():
        async with _store_for(app) as store:
            first = await store.add_document("notes", {"title": "a", "createdAt": SERVER_TIMESTAMP})
            second = await store.add_document("notes", {"title": "b", "createdAt": SERVER_TIMESTAMP})
            docs = await store.list_documents("notes", "createdAt", Direction.DESC)
            await store.delete_document("notes", first)
            remaining = await store.list_documents("notes", "createdAt", Direction.DESC)
        return first, second, docs, remaining

    first, second, docs, remaining = asyncio.run(scenario())

    assert [d.id for d in docs] == [second, first]
    assert isinstance(docs[0].fields["createdAt"], datetime)
    assert [d.id for d in remaining] == [second]


def test_synchronizer_against_the_service(app):
    async def scenario():
        async with _store_for(app) as store:
            sync = NoteSynchronizer(store, collection="notes", confirm=lambda p: True)
            await sync.load()
            assert sync.notes == ()
            await sync.create("Groceries", "Milk, eggs")
            created = sync.notes
            await sync.remove(created[0].id)
            return created, sync.notes

    created, after = asyncio.run(scenario())
    assert [(n.title, n.content) for n in created] == [("Groceries", "Milk, eggs")]
    assert after == ()


def test_delete_of_missing_document_is_not_an_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(404, json={"detail": "Document not found"}))

    async def scenario():
        async with HttpDocumentStore(base_url="http://store", transport=transport) as store:
            await store.delete_document("notes", "gone")

    asyncio.run(scenario())


@pytest.mark.parametrize(
    "method, expected",
    [("add", StoreWriteError), ("list", StoreReadError), ("delete", StoreWriteError)],
)
def test_server_errors_are_mapped(method, expected):
    transport = httpx.MockTransport(lambda request: httpx.Response(500, json={"detail": "boom"}))

    async def scenario():
        async with HttpDocumentStore(base_url="http://store", transport=transport) as store:
            if method == "add":
                await store.add_document("notes", {"title": "t"})
            elif method == "list":
                await store.list_documents("notes", "createdAt", Direction.DESC)
            else:
                await store.delete_document("notes", "x")

    with pytest.raises(expected) as info:
        asyncio.run(scenario())
    assert info.value.status_code == 500
    assert str(info.value) == "boom (HTTP 500)"


def test_transport_errors_are_mapped():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async def scenario():
        async with HttpDocumentStore(base_url="http://store", transport=httpx.MockTransport(handler)) as store:
            await store.list_documents("notes", "createdAt", Direction.DESC)

    with pytest.raises(StoreReadError) as info:
        asyncio.run(scenario())
    assert info.value.status_code is None
    assert isinstance(info.value.__cause__, httpx.ConnectError)


def test_list_sends_order_parameters():
    captured = {}

    def handler(request):
        captured["url"] = request.url
        return httpx.Response(200, json=[])

    async def scenario():
        async with HttpDocumentStore(base_url="http://store", transport=httpx.MockTransport(handler)) as store:
            return await store.list_documents("notes", "createdAt", Direction.DESC)

    assert asyncio.run(scenario()) == []
    assert captured["url"].path == "/collections/notes/documents"
    assert captured["url"].params["order_by"] == "createdAt"
    assert captured["url"].params["direction"] == "desc"


def test_malformed_list_payload_is_a_read_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"unexpected": True}))

    async def scenario():
        async with HttpDocumentStore(base_url="http://store", transport=transport) as store:
            await store.list_documents("notes", "createdAt", Direction.DESC)

    with pytest.raises(StoreReadError):
        asyncio.run(scenario())


@pytest.mark.parametrize(
    "payload",
    [
        [{"id": "a", "fields": [1]}],
        [{"id": "a", "fields": "title"}],
        ["a"],
        [{"fields": {}}],
    ],
)
def test_list_items_with_wrong_shape_are_read_errors(payload):
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=payload))

    async def scenario():
        async with HttpDocumentStore(base_url="http://store", transport=transport) as store:
            await store.list_documents("notes", "createdAt", Direction.DESC)

    with pytest.raises(StoreReadError):
        asyncio.run(scenario())


def test_load_reports_malformed_list_as_load_failure():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=[{"id": "a", "fields": [1]}]))

    async def scenario():
        async with HttpDocumentStore(base_url="http://store", transport=transport) as store:
            sync = NoteSynchronizer(store, collection="notes")
            return sync, await sync.load()

    sync, ok = asyncio.run(scenario())
    assert ok is False
    assert isinstance(sync.last_error, LoadFailed)
    assert isinstance(sync.last_error.__cause__, StoreReadError)
    assert sync.loading is False


def test_undecodable_error_body_becomes_create_failure():
    transport = httpx.MockTransport(lambda request: httpx.Response(502, content=b"\x80bad gateway"))

    async def scenario():
        async with HttpDocumentStore(base_url="http://store", transport=transport) as store:
            sync = NoteSynchronizer(store, collection="notes")
            return sync, await sync.create("t", "c")

    sync, ok = asyncio.run(scenario())
    assert ok is False
    assert isinstance(sync.last_error, CreateFailed)
    assert sync.last_error.__cause__.status_code == 502


def test_undecodable_add_response_is_a_write_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(201, content=b"\xff\xfe"))

    async def scenario():
        async with HttpDocumentStore(base_url="http://store", transport=transport) as store:
            await store.add_document("notes", {"title": "t"})

    with pytest.raises(StoreWriteError):
        asyncio.run(scenario())
