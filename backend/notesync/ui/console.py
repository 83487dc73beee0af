"""Terminal front end for the note synchronizer."""
from __future__ import annotations

import argparse
import asyncio
import logging
import shlex
from typing import Callable, Optional, Sequence

from notesync.client.http_store import HttpDocumentStore
from notesync.client.remote_store import RemoteStore
from notesync.models.notes import Committed, Note, Timestamp
from notesync.sync.errors import SyncError
from notesync.sync.synchronizer import NoteSynchronizer
from notesync.utils import settings
from notesync.utils.logging_setup import configure_logging

logger = logging.getLogger(__name__)

EMPTY_MESSAGE = "No notes yet. Create your first note with 'add'."
HELP_TEXT = """Commands:
  list          reload and show all notes
  add           write a new note
  delete <id>   delete a note
  help          show this help
  quit          leave"""


def format_timestamp(ts: Timestamp) -> str:
    if isinstance(ts, Committed):
        return ts.instant.astimezone().strftime("%Y-%m-%d %H:%M:%S")
    return "Just now"


def render_notes(notes: Sequence[Note], loading: bool = False) -> str:
    lines = [f"Your Notes ({len(notes)})"]
    if loading:
        lines.append("Loading...")
        return "\n".join(lines)
    if not notes:
        lines.append(EMPTY_MESSAGE)
        return "\n".join(lines)
    for note in notes:
        lines.append("")
        lines.append(f"# {note.title}  [{note.id}]")
        lines.append(note.content)
        lines.append(f"  {format_timestamp(note.created_at)}")
    return "\n".join(lines)


class ConsolePresenter:
    def __init__(
        self,
        store: RemoteStore,
        collection: Optional[str] = None,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
    ) -> None:
        self._input = input_fn
        self._output = output_fn
        self.sync = NoteSynchronizer(
            store,
            collection=collection,
            notify=self.notify,
            confirm=self.confirm,
        )

    def notify(self, error: SyncError) -> None:
        self._output(f"! {error.message}")

    def confirm(self, prompt: str) -> bool:
        answer = self._input(f"{prompt} [y/N] ")
        return answer.strip().lower() in ("y", "yes")

    def show(self) -> None:
        self._output(render_notes(self.sync.notes, self.sync.loading))

    async def handle(self, line: str) -> bool:
        """Run one command line. Returns False when the user wants to leave."""
        try:
            parts = shlex.split(line)
        except ValueError:
            self._output("Could not parse command.")
            return True
        if not parts:
            return True

        command, args = parts[0].lower(), parts[1:]
        if command in ("quit", "exit"):
            return False
        if command == "help":
            self._output(HELP_TEXT)
        elif command == "list":
            await self.sync.load()
            self.show()
        elif command == "add":
            self.sync.draft.title = self._input("Title: ")
            self.sync.draft.content = self._input("Content: ")
            if await self.sync.create():
                self.show()
        elif command == "delete":
            if len(args) != 1:
                self._output("Usage: delete <id>")
            elif await self.sync.remove(args[0]):
                self.show()
        else:
            self._output(f"Unknown command: {command}. Type 'help'.")
        return True

    async def run(self) -> None:
        await self.sync.load()
        self.show()
        while True:
            try:
                line = self._input("> ")
            except EOFError:
                break
            if not await self.handle(line):
                break


async def _run(store_url: str, collection: str) -> None:
    async with HttpDocumentStore(base_url=store_url) as store:
        await ConsolePresenter(store, collection=collection).run()


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="notesync", description="Simple notes kept in a document store.")
    parser.add_argument("--store-url", default=settings.store_url(), help="document store base URL")
    parser.add_argument("--collection", default=settings.notes_collection(), help="collection holding the notes")
    args = parser.parse_args(argv)

    configure_logging()
    logger.debug("Using store %s, collection %s", args.store_url, args.collection)
    try:
        asyncio.run(_run(args.store_url, args.collection))
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
