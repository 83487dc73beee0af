import json
import os
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from notesync.storage.document_store import _safe_collection_dir


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _events_path(base_dir: Path, collection: str) -> Path:
    return _safe_collection_dir(base_dir, collection) / "events" / "events.log"


@dataclass(frozen=True)
class Event:
    event_type: str
    collection: str
    document_id: Optional[str] = None
    meta: Optional[dict[str, Any]] = None

    def to_json_line(self) -> str:
        obj = {
            "event_id": str(uuid.uuid4()),
            "event_type": self.event_type,
            "ts": _utc_now_iso(),
            "collection": self.collection,
            "document_id": self.document_id,
            "meta": self.meta or {},
        }
        return json.dumps(obj, ensure_ascii=False)


class EventLog:
    """Append-only audit trail of writes, one log per collection."""

    def __init__(self, base_dir: Path):
        self.base_dir = base_dir

    def emit(self, event: Event) -> None:
        path = _events_path(self.base_dir, event.collection)
        path.parent.mkdir(parents=True, exist_ok=True)

        with path.open("a", encoding="utf-8") as f:
            f.write(event.to_json_line() + "\n")
            f.flush()
            os.fsync(f.fileno())

    def read(self, collection: str) -> list[dict[str, Any]]:
        path = _events_path(self.base_dir, collection)
        if not path.exists():
            return []
        out = []
        for line in path.read_text(encoding="utf-8").splitlines():
            if not line.strip():
                continue
            out.append(json.loads(line))
        return out
