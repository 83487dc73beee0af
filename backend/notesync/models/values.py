"""Field value codec shared by the document store service and its clients.

Documents are schema-less JSON objects. Two values need a tagged form on the
wire so they survive the JSON round trip:

- the server-timestamp sentinel: ``{"__type__": "serverTimestamp"}``
- a committed instant: ``{"__type__": "timestamp", "value": "<ISO-8601>"}``

Everything else is passed through as-is.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

TYPE_KEY = "__type__"
_SERVER_TIMESTAMP_TAG = "serverTimestamp"
_TIMESTAMP_TAG = "timestamp"


class ServerTimestamp:
    """Marker asking the store to fill in its own commit time."""

    _instance: "ServerTimestamp | None" = None

    def __new__(cls) -> "ServerTimestamp":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = ServerTimestamp()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def encode_value(value: Any) -> Any:
    if value is SERVER_TIMESTAMP:
        return {TYPE_KEY: _SERVER_TIMESTAMP_TAG}
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return {TYPE_KEY: _TIMESTAMP_TAG, "value": value.isoformat()}
    if isinstance(value, dict):
        return {k: encode_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode_value(v) for v in value]
    return value


def decode_value(value: Any) -> Any:
    if isinstance(value, dict):
        tag = value.get(TYPE_KEY)
        if tag == _SERVER_TIMESTAMP_TAG:
            return SERVER_TIMESTAMP
        if tag == _TIMESTAMP_TAG:
            raw = value.get("value")
            if not isinstance(raw, str):
                raise ValueError("Invalid timestamp value")
            return datetime.fromisoformat(raw)
        return {k: decode_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [decode_value(v) for v in value]
    return value


def encode_fields(fields: dict[str, Any]) -> dict[str, Any]:
    return {k: encode_value(v) for k, v in fields.items()}


def decode_fields(raw: dict[str, Any]) -> dict[str, Any]:
    return {k: decode_value(v) for k, v in raw.items()}


def resolve_server_timestamps(fields: dict[str, Any], now: datetime) -> dict[str, Any]:
    """Replace every top-level sentinel with ``now``."""
    return {k: (now if v is SERVER_TIMESTAMP else v) for k, v in fields.items()}
