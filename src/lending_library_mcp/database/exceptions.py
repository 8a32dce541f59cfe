"""Exceptions raised by the persistence layer."""


class RepositoryException(Exception):
    """Base exception for repository operations."""


class DuplicateError(RepositoryException):
    """Raised when attempting to create a duplicate entity."""
