"""
Lending Library MCP Server Models.

Pydantic snapshots of the entities the loan service works with:
- Member: a registered borrower
- Book / Journal: the two catalog variants, joined as the LibraryItem union
- Loan / LoanItem: a checkout and the state of each borrowed item
- LoanSummary: a loan without items, for member histories
"""

from .catalog import Book, Journal, LibraryItem, item_adapter, item_from_row
from .loan import LOAN_PERIOD_DAYS, Loan, LoanItem, LoanStatus, LoanSummary
from .member import Member

__all__ = [
    "LOAN_PERIOD_DAYS",
    "Book",
    "Journal",
    "LibraryItem",
    "Loan",
    "LoanItem",
    "LoanStatus",
    "LoanSummary",
    "Member",
    "item_adapter",
    "item_from_row",
]
