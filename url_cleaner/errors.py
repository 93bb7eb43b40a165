"""Exceptions raised by the URL Cleaner core."""

from __future__ import annotations


class URLCleanerError(Exception):
    """Base class for service errors."""


class InputValidationError(URLCleanerError, ValueError):
    """Caller supplied a missing or malformed value."""


class NotFoundError(URLCleanerError, KeyError):
    """A referenced profile or import does not exist."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""


class ProfileExistsError(URLCleanerError):
    """A profile with the requested name already exists."""


class StorageError(URLCleanerError, RuntimeError):
    """The storage backend failed to complete an operation."""


__all__ = [
    "URLCleanerError",
    "InputValidationError",
    "NotFoundError",
    "ProfileExistsError",
    "StorageError",
]
