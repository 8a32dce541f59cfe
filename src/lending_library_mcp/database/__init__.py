"""
Database package for the Lending Library MCP Server.

This package provides:
- SQLAlchemy schema definitions and entity behaviour (schema.py)
- Session management and transaction scopes (session.py)
- Repositories used by the loan service (*_repository.py)
- Sample data for new databases (seed.py)
"""

from .exceptions import DuplicateError, RepositoryException
from .item_repository import LibraryItemRepository
from .loan_repository import LoanItemRepository, LoanRepository
from .member_repository import MemberRepository
from .repository import BaseRepository
from .schema import (
    Base,
    ItemTypeEnum,
    LibraryItem,
    Loan,
    LoanItem,
    LoanStatusEnum,
    Member,
)
from .seed import seed_library
from .session import (
    DatabaseManager,
    get_db_manager,
    reset_db_manager,
    safe_flush,
    safe_query,
    session_scope,
)

__all__ = [
    "Base",
    "BaseRepository",
    "DatabaseManager",
    "DuplicateError",
    "ItemTypeEnum",
    "LibraryItem",
    "LibraryItemRepository",
    "Loan",
    "LoanItem",
    "LoanItemRepository",
    "LoanRepository",
    "LoanStatusEnum",
    "Member",
    "MemberRepository",
    "RepositoryException",
    "get_db_manager",
    "reset_db_manager",
    "safe_flush",
    "safe_query",
    "seed_library",
    "session_scope",
]
