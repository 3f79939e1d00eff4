"""Exceptions raised by the driving journal."""
from typing import Any, Dict, Optional


class JournalError(Exception):
    """Base exception for journal errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidRequest(JournalError):
    """The request's id sets or values are empty, malformed or contradictory."""
    pass


class AlreadyGrouped(InvalidRequest):
    """A drive offered for grouping already belongs to a grouped drive."""
    pass


class StorageError(JournalError):
    """The store was unreachable or rejected a read or write."""
    pass


class NoAffectedRange(JournalError):
    """None of the given drive or group ids resolved to a record."""
    pass
