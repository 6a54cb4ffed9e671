from __future__ import annotations


class PasteError(Exception):
    """Base class for paste-related errors."""


class ValidationError(PasteError):
    """Raised when a paste is created with invalid parameters."""


class StorageError(PasteError):
    """
    Raised when the backing storage engine fails.

    Callers should treat it as fatal to the current request; retrying is
    left to their discretion.
    """
