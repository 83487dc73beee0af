from __future__ import annotations

import os
from pathlib import Path

# backend/notesync/utils -> repository root
DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"
DEFAULT_STORE_URL = "http://127.0.0.1:8000"
DEFAULT_COLLECTION = "notes"
DEFAULT_TIMEOUT_SECONDS = 10.0


def data_dir() -> Path:
    return Path(os.getenv("APP_DATA_DIR", str(DEFAULT_DATA_DIR)))


def store_url() -> str:
    return os.getenv("NOTESYNC_STORE_URL", DEFAULT_STORE_URL).rstrip("/")


def notes_collection() -> str:
    return os.getenv("NOTESYNC_COLLECTION", DEFAULT_COLLECTION)


def timeout_seconds() -> float:
    try:
        value = float(os.getenv("NOTESYNC_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS)))
    except ValueError:
        return DEFAULT_TIMEOUT_SECONDS
    return value if value > 0 else DEFAULT_TIMEOUT_SECONDS


def log_level() -> str:
    return os.getenv("NOTESYNC_LOG_LEVEL", "INFO").upper()
