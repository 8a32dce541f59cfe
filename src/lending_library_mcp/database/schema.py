"""
SQLAlchemy database schema for the Lending Library MCP Server.

This module defines the tables behind the checkout workflow and the entity
behaviour that keeps them consistent:

1. members       - library members who borrow items
2. library_items - the catalog; books and journals share one table and are
                   told apart by the ``item_type`` discriminator
3. loans         - one borrowing transaction per checkout
4. loan_items    - the items of a loan, each with its own return state

Ownership is one-directional. A Loan owns its LoanItems, a LoanItem points at
its LibraryItem, and nothing points back: a member's loans and a loan item's
loan are found through the ``member_id`` / ``loan_id`` columns.
"""

import enum
import re
from datetime import date

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship, validates
from sqlalchemy.sql import func

Base = declarative_base()


class ItemTypeEnum(str, enum.Enum):
    """Discriminator for the library item variants."""

    BOOK = "BOOK"
    JOURNAL = "JOURNAL"


class LoanStatusEnum(str, enum.Enum):
    """Database enum for loan status."""

    OPEN = "OPEN"
    CLOSED = "CLOSED"


class Member(Base):
    """
    Members table - people allowed to borrow items.

    Email addresses are unique; registering a second member with the same
    address violates ``uq_member_email``.
    """

    __tablename__ = "members"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)

    created_at = Column(DateTime, nullable=False, default=func.now())

    __table_args__ = (
        UniqueConstraint("email", name="uq_member_email"),
        Index("idx_member_last_name", "last_name"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class LibraryItem(Base):
    """
    Library items table - the lendable catalog.

    A tagged union stored in a single table: ``item_type`` selects the variant
    and only that variant's columns are populated. Check constraints keep the
    payload consistent with the tag.
    """

    __tablename__ = "library_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    item_type = Column(Enum(ItemTypeEnum), nullable=False)
    title = Column(String(500), nullable=False)
    author = Column(String(200), nullable=False)
    publication_date = Column(Date, nullable=False)
    available = Column(Boolean, nullable=False, default=True)

    # Book payload
    isbn = Column(String(17), nullable=True)
    genre = Column(String(100), nullable=True)
    page_count = Column(Integer, nullable=True)

    # Journal payload
    issn = Column(String(9), nullable=True)
    publisher = Column(String(200), nullable=True)
    volume = Column(Integer, nullable=True)
    issue = Column(Integer, nullable=True)

    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=True, default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("idx_item_title", "title"),
        Index("idx_item_availability", "available"),
        CheckConstraint(
            (
                "item_type != 'BOOK' OR "
                "(isbn IS NOT NULL AND genre IS NOT NULL AND page_count > 0)"
            ),
            name="check_book_payload",
        ),
        CheckConstraint(
            (
                "item_type != 'JOURNAL' OR (issn IS NOT NULL AND publisher IS NOT NULL "
                "AND volume IS NOT NULL AND issue IS NOT NULL)"
            ),
            name="check_journal_payload",
        ),
    )

    @validates("page_count")
    def validate_page_count(self, key, value):  # noqa: ARG002
        """Books must have a positive page count."""
        if value is not None and value <= 0:
            raise ValueError("Page count must be greater than zero")
        return value

    @validates("isbn")
    def validate_isbn(self, key, value):  # noqa: ARG002
        """ISBN-10 or ISBN-13, hyphens allowed."""
        if value is not None:
            digits = value.replace("-", "")
            if not re.fullmatch(r"\d{9}[\dX]|\d{13}", digits):
                raise ValueError(f"Invalid ISBN: {value}")
        return value

    @validates("issn")
    def validate_issn(self, key, value):  # noqa: ARG002
        """ISSN in NNNN-NNNC form."""
        if value is not None and not re.fullmatch(r"\d{4}-\d{3}[\dX]", value):
            raise ValueError(f"Invalid ISSN: {value}")
        return value

    @property
    def type(self) -> str:
        """Discriminant value, ``BOOK`` or ``JOURNAL``."""
        return ItemTypeEnum(self.item_type).value


class Loan(Base):
    """
    Loans table - one row per checkout.

    The status is derived: CLOSED exactly when every item has been returned.
    ``update_status`` recomputes it from scratch and is called after every
    return.
    """

    __tablename__ = "loans"

    id = Column(Integer, primary_key=True, autoincrement=True)
    member_id = Column(Integer, ForeignKey("members.id"), nullable=False)
    loan_date = Column(Date, nullable=False)
    expected_return_date = Column(Date, nullable=False)
    status = Column(Enum(LoanStatusEnum), nullable=False, default=LoanStatusEnum.OPEN)

    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=False, default=func.now(), onupdate=func.now())

    items = relationship(
        "LoanItem",
        order_by="LoanItem.id",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        Index("idx_loan_member", "member_id"),
        Index("idx_loan_member_date", "member_id", "loan_date"),
        Index("idx_loan_status", "status"),
        CheckConstraint("expected_return_date > loan_date", name="check_return_after_loan"),
    )

    def add_item(self, loan_item: "LoanItem") -> None:
        """Append an item, keeping request order."""
        self.items.append(loan_item)

    @property
    def all_returned(self) -> bool:
        return all(item.is_returned for item in self.items)

    @property
    def is_closed(self) -> bool:
        return self.status == LoanStatusEnum.CLOSED

    def update_status(self) -> None:
        """Recompute status from the items' return state."""
        self.status = LoanStatusEnum.CLOSED if self.all_returned else LoanStatusEnum.OPEN


class LoanItem(Base):
    """
    Loan items table - the association between a loan and a catalog item.

    ``returned_date`` stays NULL until the item comes back and is never
    cleared afterwards.
    """

    __tablename__ = "loan_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    loan_id = Column(Integer, ForeignKey("loans.id"), nullable=False)
    item_id = Column(Integer, ForeignKey("library_items.id"), nullable=False)
    returned_date = Column(Date, nullable=True)

    item = relationship("LibraryItem", lazy="joined")

    __table_args__ = (
        Index("idx_loan_item_loan", "loan_id"),
        Index("idx_loan_item_item", "item_id"),
        UniqueConstraint("loan_id", "item_id", name="uq_loan_item"),
    )

    @validates("returned_date")
    def validate_returned_date(self, key, value):  # noqa: ARG002
        """Once recorded, a return cannot be undone."""
        if value is None and self.returned_date is not None:
            raise ValueError("Returned date cannot be cleared once set")
        return value

    @property
    def is_returned(self) -> bool:
        return self.returned_date is not None

    def mark_returned(self, on: date) -> None:
        """Record the return and put the item back on the shelf."""
        self.returned_date = on
        self.item.available = True
