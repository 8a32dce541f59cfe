"""
Loan domain service for the Lending Library MCP Server.

This is where the checkout and return rules live:

1. checkout: reserve every requested item and open a loan for a member
2. return_items: bring items back and close the loan once nothing is out
3. get_member_loans / get_loan_by_id: read the loan history
4. get_member: look up the borrower

The service talks to the database only through the repositories handed to
it and never commits. Errors are raised where they are detected and are not
caught here. Items saved before a failing checkout step stay reserved in the
session; running the call inside ``session_scope()`` rolls them back.
"""

import logging
from collections.abc import Callable, Sequence
from datetime import date, timedelta

from sqlalchemy.orm import Session

from ..database.item_repository import LibraryItemRepository
from ..database.loan_repository import LoanItemRepository, LoanRepository
from ..database.member_repository import MemberRepository
from ..database.schema import Loan as LoanDB
from ..database.schema import LoanItem as LoanItemDB
from ..database.schema import LoanStatusEnum
from ..errors import (
    InvalidLoanStateError,
    ItemNotAvailableError,
    ItemNotFoundError,
    LoanNotFoundError,
    LoanValidationError,
    MemberNotFoundError,
)
from ..models.loan import LOAN_PERIOD_DAYS, Loan
from ..models.member import Member

logger = logging.getLogger(__name__)


class LoanService:
    """
    Checkout and return operations over the persistence gateway.

    Args:
        members: Member lookups
        items: Catalog lookups and availability updates
        loans: Loan lookups and saving
        loan_items: Per-item lookups within a loan
        today: Clock used for loan and return dates
    """

    def __init__(
        self,
        members: MemberRepository,
        items: LibraryItemRepository,
        loans: LoanRepository,
        loan_items: LoanItemRepository,
        today: Callable[[], date] = date.today,
    ):
        self.members = members
        self.items = items
        self.loans = loans
        self.loan_items = loan_items
        self._today = today

    @classmethod
    def from_session(
        cls, session: Session, today: Callable[[], date] = date.today
    ) -> "LoanService":
        """Build a service whose repositories share one session."""
        return cls(
            members=MemberRepository(session),
            items=LibraryItemRepository(session),
            loans=LoanRepository(session),
            loan_items=LoanItemRepository(session),
            today=today,
        )

    def checkout(self, member_id: int, item_ids: Sequence[int]) -> Loan:
        """
        Check out items to a member.

        Items are reserved one at a time in the order given, and the loan
        lists them in that order. The loan is due back ``LOAN_PERIOD_DAYS``
        after today.

        Args:
            member_id: Borrowing member
            item_ids: Catalog items to borrow, at least one

        Returns:
            The new OPEN loan with all its items

        Raises:
            LoanValidationError: If ``item_ids`` is empty
            MemberNotFoundError: If the member does not exist
            ItemNotFoundError: If an item does not exist
            ItemNotAvailableError: If an item is already on loan
        """
        if not item_ids:
            raise LoanValidationError("Items list cannot be empty")

        member = self.members.find_by_id(member_id)
        if member is None:
            raise MemberNotFoundError(f"Member not found with ID: {member_id}")

        loan_date = self._today()
        loan = LoanDB(
            member_id=member.id,
            loan_date=loan_date,
            expected_return_date=loan_date + timedelta(days=LOAN_PERIOD_DAYS),
            status=LoanStatusEnum.OPEN,
        )

        for item_id in item_ids:
            item = self.items.find_available_by_id(item_id)
            if item is None:
                existing = self.items.find_by_id(item_id)
                if existing is None:
                    raise ItemNotFoundError(f"Item not found with ID: {item_id}")
                raise ItemNotAvailableError(
                    f"Item '{existing.title}' is currently loaned out", item_id=item_id
                )

            item.available = False
            self.items.save(item)

            loan.add_item(LoanItemDB(item=item))
            logger.info("Added item %s to loan for member %s", item_id, member_id)

        saved = self.loans.save(loan)
        logger.info(
            "Created loan %s with %d items for member %s", saved.id, len(item_ids), member_id
        )
        return Loan.from_row(saved)

    def get_member(self, member_id: int) -> Member:
        """
        A member's details.

        Raises:
            MemberNotFoundError: If the member does not exist
        """
        member = self.members.find_by_id(member_id)
        if member is None:
            raise MemberNotFoundError(f"Member not found with ID: {member_id}")
        return Member.model_validate(member)

    def get_member_loans(self, member_id: int) -> list[Loan]:
        """
        All loans of a member, newest first.

        Raises:
            MemberNotFoundError: If the member does not exist
        """
        if not self.members.exists_by_id(member_id):
            raise MemberNotFoundError(f"Member not found with ID: {member_id}")

        return [
            Loan.from_row(loan)
            for loan in self.loans.find_by_member_id_order_by_loan_date_desc(member_id)
        ]

    def get_loan_by_id(self, loan_id: int) -> Loan:
        """
        A single loan with its items.

        Raises:
            LoanNotFoundError: If the loan does not exist
        """
        loan = self.loans.find_by_id_with_items(loan_id)
        if loan is None:
            raise LoanNotFoundError(f"Loan not found with ID: {loan_id}")
        return Loan.from_row(loan)

    def return_items(self, loan_id: int, item_ids: Sequence[int] | None = None) -> Loan:
        """
        Return items of a loan.

        Returning an item twice is a no-op. After the items are processed
        the loan's status is recomputed: CLOSED once every item is back,
        OPEN otherwise.

        Args:
            loan_id: Loan to return against
            item_ids: Catalog items to return; empty or None returns every
                item still out

        Returns:
            The updated loan

        Raises:
            LoanNotFoundError: If the loan does not exist
            InvalidLoanStateError: If the loan is already closed
            ItemNotFoundError: If an item is not part of this loan
        """
        loan = self.loans.find_by_id_with_items(loan_id)
        if loan is None:
            raise LoanNotFoundError(f"Loan not found with ID: {loan_id}")

        if loan.is_closed:
            raise InvalidLoanStateError("Loan is already closed")

        if not item_ids:
            item_ids = [
                loan_item.item_id
                for loan_item in self.loan_items.find_active_items_by_loan_id(loan_id)
            ]

        for item_id in item_ids:
            loan_item = self.loan_items.find_by_loan_id_and_item_id(loan_id, item_id)
            if loan_item is None:
                raise ItemNotFoundError(f"Item {item_id} not found in loan {loan_id}")

            if loan_item.is_returned:
                logger.debug("Item %s of loan %s already returned", item_id, loan_id)
                continue

            loan_item.mark_returned(self._today())
            self.items.save(loan_item.item)
            self.loan_items.save(loan_item)
            logger.info("Returned item %s from loan %s", item_id, loan_id)

        loan.update_status()
        updated = self.loans.save(loan)

        logger.info("Updated loan %s status to %s", loan_id, updated.status.value)
        return Loan.from_row(updated)

    def return_all_items(self, loan_id: int) -> Loan:
        """Return every item still out on a loan."""
        return self.return_items(loan_id, [])
