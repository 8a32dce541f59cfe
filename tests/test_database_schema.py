"""
Tests for database schema and session management.

These tests verify:
1. Tables are created correctly
2. Constraints are enforced
3. Entity behaviour (status recomputation, returns)
4. Session scopes commit and roll back
"""

from datetime import date

import pytest
from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError

from lending_library_mcp.database import (
    ItemTypeEnum,
    LibraryItem,
    Loan,
    LoanItem,
    LoanStatusEnum,
    Member,
    session_scope,
)
from lending_library_mcp.models import item_from_row


def make_book(**overrides) -> LibraryItem:
    fields = {
        "item_type": ItemTypeEnum.BOOK,
        "title": "Refactoring",
        "author": "Martin Fowler",
        "publication_date": date(2018, 11, 19),
        "isbn": "9780134757599",
        "genre": "Programming",
        "page_count": 448,
    }
    fields.update(overrides)
    return LibraryItem(**fields)


def make_member(email="dana@example.com") -> Member:
    return Member(first_name="Dana", last_name="Scully", email=email)


def make_loan(member: Member, *items: LibraryItem) -> Loan:
    loan = Loan(
        member_id=member.id,
        loan_date=date(2025, 3, 1),
        expected_return_date=date(2025, 3, 15),
    )
    for item in items:
        loan.add_item(LoanItem(item=item))
    return loan


class TestSchema:
    """Test table creation and constraints."""

    def test_tables_created(self, db_manager):
        tables = set(inspect(db_manager.engine).get_table_names())

        assert {"members", "library_items", "loans", "loan_items"} <= tables

    def test_member_email_unique(self, db_session):
        db_session.add_all([make_member(), make_member()])

        with pytest.raises(IntegrityError):
            db_session.flush()

    def test_book_requires_isbn(self, db_session):
        db_session.add(make_book(isbn=None))

        with pytest.raises(IntegrityError):
            db_session.flush()

    def test_journal_requires_publisher(self, db_session):
        db_session.add(
            LibraryItem(
                item_type=ItemTypeEnum.JOURNAL,
                title="Communications of the ACM",
                author="Various",
                publication_date=date(2024, 1, 1),
                issn="0001-0782",
                volume=67,
                issue=1,
            )
        )

        with pytest.raises(IntegrityError):
            db_session.flush()

    def test_book_requires_genre(self, db_session):
        db_session.add(make_book(genre=None))

        with pytest.raises(IntegrityError):
            db_session.flush()

    @pytest.mark.parametrize("missing", ["volume", "issue"])
    def test_journal_requires_volume_and_issue(self, db_session, missing):
        fields = {
            "item_type": ItemTypeEnum.JOURNAL,
            "title": "Communications of the ACM",
            "author": "Various",
            "publication_date": date(2024, 1, 1),
            "issn": "0001-0782",
            "publisher": "ACM",
            "volume": 67,
            "issue": 1,
        }
        fields[missing] = None
        db_session.add(LibraryItem(**fields))

        with pytest.raises(IntegrityError):
            db_session.flush()

    @pytest.mark.parametrize("isbn", ["123", "97801323508841", "not-an-isbn"])
    def test_isbn_format_validated(self, isbn):
        with pytest.raises(ValueError, match="Invalid ISBN"):
            make_book(isbn=isbn)

    def test_hyphenated_isbn_accepted(self):
        assert make_book(isbn="978-0-13-475759-9").isbn == "978-0-13-475759-9"

    def test_issn_format_validated(self):
        with pytest.raises(ValueError, match="Invalid ISSN"):
            LibraryItem(item_type=ItemTypeEnum.JOURNAL, issn="12345678")

    def test_stored_items_load_as_snapshots(self, db_session):
        """Every row the table accepts converts to its catalog model."""
        book = make_book(isbn="978-0-13-475759-9")
        db_session.add(book)
        db_session.flush()

        snapshot = item_from_row(book)

        assert snapshot.type == "BOOK"
        assert snapshot.isbn == "9780134757599"

    def test_page_count_validated(self):
        with pytest.raises(ValueError, match="greater than zero"):
            make_book(page_count=0)

    def test_due_date_after_loan_date(self, db_session):
        member = make_member()
        db_session.add(member)
        db_session.flush()

        db_session.add(
            Loan(
                member_id=member.id,
                loan_date=date(2025, 3, 1),
                expected_return_date=date(2025, 3, 1),
            )
        )

        with pytest.raises(IntegrityError):
            db_session.flush()

    def test_loan_requires_existing_member(self, db_session):
        db_session.add(make_loan(Member(id=999)))

        with pytest.raises(IntegrityError):
            db_session.flush()


class TestLoanEntity:
    """Test loan and loan item behaviour."""

    @pytest.fixture
    def loan(self, db_session) -> Loan:
        member = make_member()
        db_session.add(member)
        db_session.flush()

        loan = make_loan(member, make_book(), make_book(title="Domain-Driven Design"))
        db_session.add(loan)
        db_session.flush()
        return loan

    def test_defaults(self, loan):
        assert loan.status == LoanStatusEnum.OPEN
        assert loan.items[0].item.available is True
        assert [item.loan_id for item in loan.items] == [loan.id, loan.id]

    def test_item_type_property(self, loan):
        assert loan.items[0].item.type == "BOOK"

    def test_mark_returned(self, loan):
        loan_item = loan.items[0]
        loan_item.item.available = False

        loan_item.mark_returned(date(2025, 3, 5))

        assert loan_item.is_returned
        assert loan_item.returned_date == date(2025, 3, 5)
        assert loan_item.item.available is True

    def test_returned_date_cannot_be_cleared(self, loan):
        loan.items[0].mark_returned(date(2025, 3, 5))

        with pytest.raises(ValueError, match="cannot be cleared"):
            loan.items[0].returned_date = None

    def test_update_status(self, loan):
        loan.items[0].mark_returned(date(2025, 3, 5))
        loan.update_status()
        assert loan.status == LoanStatusEnum.OPEN

        loan.items[1].mark_returned(date(2025, 3, 6))
        loan.update_status()
        assert loan.is_closed

    def test_same_item_once_per_loan(self, db_session, loan):
        loan.add_item(LoanItem(item=loan.items[0].item))

        with pytest.raises(IntegrityError):
            db_session.flush()


class TestSessionScope:
    """Test the module-level transactional scope."""

    def test_commit_on_success(self, db_manager):
        with session_scope() as session:
            session.add(make_member())

        with session_scope() as session:
            assert session.query(Member).count() == 1

    def test_rollback_on_error(self, db_manager):
        with pytest.raises(RuntimeError), session_scope() as session:
            session.add(make_member())
            session.flush()
            raise RuntimeError("boom")

        with session_scope() as session:
            assert session.query(Member).count() == 0

    def test_verify_connection(self, db_manager):
        assert db_manager.verify_connection() is True
