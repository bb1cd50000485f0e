from __future__ import annotations

from typing import Optional


class ActivityLogError(Exception):
    """Base class for domain errors raised by the activity log."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFound(ActivityLogError):
    def __init__(self, kind: str, identifier: int, parent_id: Optional[int] = None) -> None:
        if parent_id is None:
            message = f"{kind} {identifier} not found"
        else:
            message = f"{kind} {identifier} not found in activity {parent_id}"
        super().__init__(message)
        self.kind = kind
        self.identifier = identifier
        self.parent_id = parent_id


class StorageCorrupt(ActivityLogError):
    """Persisted blob could not be decoded. Readers recover by treating it as empty."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Stored data under '{key}' is unreadable: {reason}")
        self.key = key
        self.reason = reason


class ClipboardUnavailable(ActivityLogError):
    """Clipboard read or write was denied or is unsupported."""


class InvalidLink(ActivityLogError):
    def __init__(self, text: str) -> None:
        super().__init__(f'"{text}" is not a valid link')
        self.text = text


class UnrecognizedText(ActivityLogError):
    """Pasted text contained no recognised labels."""


class MissingMainPerson(ActivityLogError):
    """Parsed activity has no main person."""


__all__ = [
    "ActivityLogError",
    "NotFound",
    "StorageCorrupt",
    "ClipboardUnavailable",
    "InvalidLink",
    "UnrecognizedText",
    "MissingMainPerson",
]
