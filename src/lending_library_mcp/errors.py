"""
Domain errors raised by the loan service.

Every error here describes a condition the caller can correct (a wrong id,
an item already on loan, an empty request). They are raised where the problem
is detected and travel unmodified to the tool layer, which turns them into
error responses. Persistence failures are not part of this hierarchy; they
surface as ``RepositoryException`` from the database package.
"""


class LoanDomainError(Exception):
    """Base class for checkout and return rule violations."""


class MemberNotFoundError(LoanDomainError):
    """Raised when a member id does not exist."""


class ItemNotFoundError(LoanDomainError):
    """Raised when a library item, or an item within a loan, does not exist."""


class ItemNotAvailableError(LoanDomainError):
    """Raised when a requested item exists but is currently loaned out."""

    def __init__(self, message: str, item_id: int | None = None):
        super().__init__(message)
        self.item_id = item_id


class LoanNotFoundError(LoanDomainError):
    """Raised when a loan id does not exist."""


class InvalidLoanStateError(LoanDomainError):
    """Raised when returning items against a loan that is already closed."""


class LoanValidationError(LoanDomainError):
    """Raised when a request is malformed, e.g. a checkout with no items."""
