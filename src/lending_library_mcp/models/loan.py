"""
Loan models for the Lending Library MCP Server.

These models are the snapshots the loan service hands back to its callers:
- Loan: one checkout transaction with its items
- LoanItem: one item of a loan and its individual return state

Both re-check the loan invariants on construction, so a snapshot that
violates them (an OPEN loan whose items are all returned, say) can never
leave the service.
"""

from datetime import date, timedelta
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .catalog import LibraryItem, item_from_row

# Items are due back two weeks after checkout.
LOAN_PERIOD_DAYS = 14


class LoanStatus(str, Enum):
    """Status of a loan. CLOSED is terminal."""

    OPEN = "OPEN"
    CLOSED = "CLOSED"


class LoanItem(BaseModel):
    """An item within a loan."""

    id: int = Field(..., description="Identifier of the loan item", ge=1)

    loan_id: int = Field(..., description="Loan this item belongs to", ge=1)

    item: LibraryItem = Field(..., description="The borrowed catalog item")

    returned_date: date | None = Field(
        None,
        description="Date the item came back; null while still on loan",
    )

    @property
    def is_returned(self) -> bool:
        return self.returned_date is not None

    @property
    def item_id(self) -> int:
        return self.item.id

    @classmethod
    def from_row(cls, row: Any) -> "LoanItem":
        """Convert a ``loan_items`` row (with its item loaded)."""
        return cls(
            id=row.id,
            loan_id=row.loan_id,
            item=item_from_row(row.item),
            returned_date=row.returned_date,
        )


class Loan(BaseModel):
    """
    A borrowing transaction.

    ``items`` keeps the order the items were requested in at checkout.
    """

    id: int = Field(..., description="Identifier of the loan", ge=1)

    member_id: int = Field(..., description="Member who borrowed the items", ge=1)

    loan_date: date = Field(..., description="Date of checkout")

    expected_return_date: date = Field(
        ...,
        description=f"Due date, always {LOAN_PERIOD_DAYS} days after the loan date",
    )

    status: LoanStatus = Field(default=LoanStatus.OPEN, description="OPEN or CLOSED")

    items: list[LoanItem] = Field(default_factory=list, description="Items in request order")

    @model_validator(mode="after")
    def validate_loan(self) -> "Loan":
        """Enforce the due-date policy and the status/return invariant."""
        if self.expected_return_date != self.loan_date + timedelta(days=LOAN_PERIOD_DAYS):
            raise ValueError(
                f"Expected return date must be {LOAN_PERIOD_DAYS} days after the loan date"
            )

        all_returned = all(item.is_returned for item in self.items)
        if self.status == LoanStatus.CLOSED and not all_returned:
            raise ValueError("A closed loan cannot have items still out")
        if self.status == LoanStatus.OPEN and self.items and all_returned:
            raise ValueError("A loan with every item returned must be closed")

        return self

    @property
    def item_ids(self) -> list[int]:
        return [loan_item.item_id for loan_item in self.items]

    @property
    def active_items(self) -> list[LoanItem]:
        """Items not yet returned."""
        return [loan_item for loan_item in self.items if not loan_item.is_returned]

    @property
    def is_closed(self) -> bool:
        return self.status == LoanStatus.CLOSED

    @classmethod
    def from_row(cls, row: Any) -> "Loan":
        """Convert a ``loans`` row and its items."""
        return cls(
            id=row.id,
            member_id=row.member_id,
            loan_date=row.loan_date,
            expected_return_date=row.expected_return_date,
            status=LoanStatus(row.status.value),
            items=[LoanItem.from_row(loan_item) for loan_item in row.items],
        )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 5,
                "member_id": 1,
                "loan_date": "2025-03-01",
                "expected_return_date": "2025-03-15",
                "status": "OPEN",
                "items": [],
            }
        },
    )


class LoanSummary(BaseModel):
    """A loan without its items, as listed in a member's history."""

    loan_id: int
    loan_date: date
    expected_return_date: date
    status: LoanStatus

    @classmethod
    def from_loan(cls, loan: Loan) -> "LoanSummary":
        return cls(
            loan_id=loan.id,
            loan_date=loan.loan_date,
            expected_return_date=loan.expected_return_date,
            status=loan.status,
        )
