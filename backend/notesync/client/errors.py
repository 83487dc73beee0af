from __future__ import annotations

from typing import Optional


class StoreError(Exception):
    """A remote store call failed (transport, permission or server side)."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.message} (HTTP {self.status_code})"


class StoreReadError(StoreError):
    pass


class StoreWriteError(StoreError):
    pass
