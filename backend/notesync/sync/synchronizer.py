from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from pydantic import ValidationError

from notesync.client.errors import StoreError
from notesync.client.remote_store import Direction, RemoteStore
from notesync.models.notes import CREATED_AT_FIELD, Note, NoteCreate, NoteDraft
from notesync.sync.errors import (
    CreateFailed,
    DeleteFailed,
    LoadFailed,
    SyncError,
    SynchronizerBusy,
    ValidationFailed,
)
from notesync.utils import settings

logger = logging.getLogger(__name__)

Notifier = Callable[[SyncError], None]
Confirm = Callable[[str], bool]

DELETE_PROMPT = "Are you sure you want to delete this note?"


def _decline(prompt: str) -> bool:
    return False


class NoteSynchronizer:
    """Keeps an in-memory list of notes in step with a remote collection.

    The list is never patched from a create or delete response. Once the
    store acknowledges a write, the whole collection is re-read (newest
    first) and replaces ``notes``, so after a successful mutation the list
    reflects at least that mutation plus whatever else the store has.

    ``create`` and ``remove`` are refused while any operation is in flight.
    ``load`` can be called at any time; a read that completes after a newer
    read has already been applied is dropped.

    Failures never escape an operation: they are logged, kept in
    ``last_error`` and handed to ``notify``. ``notes`` keeps its last good
    value.
    """

    def __init__(
        self,
        store: RemoteStore,
        collection: Optional[str] = None,
        notify: Optional[Notifier] = None,
        confirm: Optional[Confirm] = None,
    ) -> None:
        self._store = store
        self.collection = collection or settings.notes_collection()
        self._notify = notify
        self._confirm = confirm or _decline
        self._notes: tuple[Note, ...] = ()
        self._in_flight = 0
        self._issued = 0
        self._applied = 0
        self.draft = NoteDraft()
        self.last_error: Optional[SyncError] = None

    @property
    def notes(self) -> tuple[Note, ...]:
        return self._notes

    @property
    def loading(self) -> bool:
        return self._in_flight > 0

    @contextmanager
    def _loading_gate(self) -> Iterator[None]:
        # nested gates (create -> refresh) keep loading set until the outer one exits
        self._in_flight += 1
        try:
            yield
        finally:
            self._in_flight -= 1

    def _fail(self, error: SyncError, cause: Optional[BaseException] = None) -> None:
        error.__cause__ = cause
        self.last_error = error
        if self._notify is not None:
            self._notify(error)

    async def load(self) -> bool:
        self.last_error = None
        with self._loading_gate():
            return await self._refresh()

    async def _refresh(self) -> bool:
        self._issued += 1
        ticket = self._issued
        try:
            docs = await self._store.list_documents(self.collection, CREATED_AT_FIELD, Direction.DESC)
        except StoreError as exc:
            logger.error("Error loading notes: %s", exc)
            self._fail(LoadFailed(), exc)
            return False

        if ticket < self._applied:
            logger.debug("Dropping stale read %d, %d already applied", ticket, self._applied)
            return True

        self._applied = ticket
        self._notes = tuple(Note.from_fields(d.id, d.fields) for d in docs)
        logger.info("Loaded %d notes", len(self._notes))
        return True

    async def create(self, title: Optional[str] = None, content: Optional[str] = None) -> bool:
        """Store a new note, then reload. Defaults to the values in ``draft``."""
        self.last_error = None
        title = self.draft.title if title is None else title
        content = self.draft.content if content is None else content

        try:
            payload = NoteCreate(title=title, content=content)
        except ValidationError as exc:
            self._fail(ValidationFailed(), exc)
            return False

        if self.loading:
            self._fail(SynchronizerBusy())
            return False

        with self._loading_gate():
            try:
                note_id = await self._store.add_document(self.collection, payload.to_fields())
            except StoreError as exc:
                logger.error("Error adding note: %s", exc)
                self._fail(CreateFailed(), exc)
                return False

            logger.info("Note %s added", note_id)
            self.draft.clear()
            await self._refresh()
        return True

    async def remove(self, note_id: str) -> bool:
        """Delete a note after the user confirms, then reload.

        Returns False without touching the store when confirmation is declined.
        """
        self.last_error = None
        if self.loading:
            self._fail(SynchronizerBusy())
            return False

        if not self._confirm(DELETE_PROMPT):
            logger.debug("Deletion of %s declined", note_id)
            return False

        with self._loading_gate():
            try:
                await self._store.delete_document(self.collection, note_id)
            except StoreError as exc:
                logger.error("Error deleting note %s: %s", note_id, exc)
                self._fail(DeleteFailed(), exc)
                return False

            logger.info("Note %s deleted", note_id)
            await self._refresh()
        return True
