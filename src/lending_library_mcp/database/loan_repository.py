"""
Loan repositories for the Lending Library MCP Server.

Two repositories cover the loan aggregate:

1. **LoanRepository**: loans with their items, and a member's loan history
2. **LoanItemRepository**: individual loan items, looked up by the
   (loan, catalog item) pair during returns

Saving a loan cascades to its items, so checkout only needs ``LoanRepository.save``.
"""

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from .repository import BaseRepository
from .schema import Loan, LoanItem
from .session import safe_query


class LoanRepository(BaseRepository[Loan]):
    """Repository for loans."""

    @property
    def model_class(self) -> type[Loan]:
        return Loan

    def find_by_id_with_items(self, id: int | None) -> Loan | None:
        """Get a loan with its items and their catalog entries loaded."""
        if id is None:
            return None

        query = (
            select(Loan)
            .where(Loan.id == id)
            .options(selectinload(Loan.items).joinedload(LoanItem.item))
        )
        return safe_query(
            self.session,
            lambda s: s.execute(query).scalar_one_or_none(),
            "Failed to get loan with items",
        )

    def find_by_member_id_order_by_loan_date_desc(self, member_id: int) -> list[Loan]:
        """
        A member's loans, newest first.

        Loans taken on the same day keep creation (id) order.
        """
        query = (
            select(Loan)
            .where(Loan.member_id == member_id)
            .order_by(Loan.loan_date.desc(), Loan.id.asc())
            .options(selectinload(Loan.items).joinedload(LoanItem.item))
        )
        return list(
            safe_query(
                self.session,
                lambda s: s.execute(query).scalars().all(),
                "Failed to get member loans",
            )
        )


class LoanItemRepository(BaseRepository[LoanItem]):
    """Repository for the items of a loan."""

    @property
    def model_class(self) -> type[LoanItem]:
        return LoanItem

    def find_by_loan_id_and_item_id(self, loan_id: int, item_id: int) -> LoanItem | None:
        """Find the entry for a catalog item within one loan."""
        query = select(LoanItem).where(LoanItem.loan_id == loan_id, LoanItem.item_id == item_id)
        return safe_query(
            self.session,
            lambda s: s.execute(query).scalars().first(),
            "Failed to get loan item",
        )

    def find_by_loan_id(self, loan_id: int) -> list[LoanItem]:
        """All items of a loan in insertion order."""
        query = select(LoanItem).where(LoanItem.loan_id == loan_id).order_by(LoanItem.id)
        return list(
            safe_query(
                self.session,
                lambda s: s.execute(query).scalars().all(),
                "Failed to get loan items",
            )
        )

    def find_active_items_by_loan_id(self, loan_id: int) -> list[LoanItem]:
        """Items of a loan that have not been returned yet, in insertion order."""
        query = (
            select(LoanItem)
            .where(LoanItem.loan_id == loan_id, LoanItem.returned_date.is_(None))
            .order_by(LoanItem.id)
        )
        return list(
            safe_query(
                self.session,
                lambda s: s.execute(query).scalars().all(),
                "Failed to get active loan items",
            )
        )
