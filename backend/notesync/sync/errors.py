from __future__ import annotations


class SyncError(Exception):
    """Failure of a synchronizer operation, phrased for the user."""

    message = "Something went wrong."

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationFailed(SyncError):
    message = "Please fill in both title and content!"


class LoadFailed(SyncError):
    message = "Failed to load notes!"


class CreateFailed(SyncError):
    message = "Failed to add note!"


class DeleteFailed(SyncError):
    message = "Failed to delete note!"


class SynchronizerBusy(SyncError):
    message = "Another operation is still in progress."
