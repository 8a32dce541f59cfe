"""
Tests for the repositories behind the loan service.

These tests run against the seeded catalog:
books 1-3, journals 4-5 and members 1-3.
"""

from datetime import date, timedelta

import pytest

from lending_library_mcp.database import (
    DuplicateError,
    ItemTypeEnum,
    LibraryItemRepository,
    Loan,
    LoanItem,
    LoanItemRepository,
    LoanRepository,
    Member,
    MemberRepository,
    RepositoryException,
)


@pytest.fixture
def repositories(seeded_session):
    """Create repository instances."""
    return {
        "member": MemberRepository(seeded_session),
        "item": LibraryItemRepository(seeded_session),
        "loan": LoanRepository(seeded_session),
        "loan_item": LoanItemRepository(seeded_session),
    }


def open_loan(repositories, member_id, loan_date, *item_ids) -> Loan:
    """Persist a loan directly, bypassing the service."""
    loan = Loan(
        member_id=member_id,
        loan_date=loan_date,
        expected_return_date=loan_date + timedelta(days=14),
    )
    for item_id in item_ids:
        item = repositories["item"].find_by_id(item_id)
        item.available = False
        loan.add_item(LoanItem(item=item))
    return repositories["loan"].save(loan)


class TestMemberRepository:
    def test_find_by_id(self, repositories):
        member = repositories["member"].find_by_id(1)

        assert member.full_name == "Alice Johnson"

    def test_find_by_id_missing(self, repositories):
        assert repositories["member"].find_by_id(999) is None
        assert repositories["member"].find_by_id(None) is None

    def test_exists_by_id(self, repositories):
        assert repositories["member"].exists_by_id(2) is True
        assert repositories["member"].exists_by_id(999) is False

    def test_find_by_email_case_insensitive(self, repositories):
        member = repositories["member"].find_by_email("BOB@example.com")

        assert member.id == 2

    def test_count(self, repositories):
        assert repositories["member"].count() == 3

    def test_duplicate_email_rejected(self, repositories):
        """Registering a second member with a known address fails."""
        with pytest.raises(DuplicateError, match="already exists"):
            repositories["member"].save(
                Member(first_name="Alicia", last_name="Jones", email="alice@example.com")
            )


class TestLibraryItemRepository:
    def test_find_available_by_id(self, repositories):
        item = repositories["item"].find_available_by_id(1)

        assert item.title == "Clean Code"

    def test_find_available_by_id_filters_loaned_items(self, repositories):
        item = repositories["item"].find_by_id(1)
        item.available = False
        repositories["item"].save(item)

        assert repositories["item"].find_available_by_id(1) is None
        assert repositories["item"].find_by_id(1) is not None

    def test_find_available_by_id_missing(self, repositories):
        assert repositories["item"].find_available_by_id(999) is None

    def test_find_available_items_by_type(self, repositories):
        journals = repositories["item"].find_available_items(ItemTypeEnum.JOURNAL)

        assert [item.id for item in journals] == [4, 5]
        assert len(repositories["item"].find_available_items()) == 5

    def test_find_by_title_containing(self, repositories):
        items = repositories["item"].find_by_title_containing("programmer")

        assert [item.title for item in items] == ["The Pragmatic Programmer"]


class TestLoanRepositories:
    def test_loan_for_missing_member(self, repositories):
        """Broken references are not reported as duplicates."""
        with pytest.raises(RepositoryException, match="violated a constraint") as exc_info:
            open_loan(repositories, 999, date(2025, 3, 1), 1)

        assert not isinstance(exc_info.value, DuplicateError)

    def test_save_cascades_to_items(self, repositories):
        loan = open_loan(repositories, 1, date(2025, 3, 1), 1, 4)

        assert loan.id is not None
        assert all(loan_item.id is not None for loan_item in loan.items)
        stored = repositories["loan_item"].find_by_loan_id(loan.id)
        assert [loan_item.item_id for loan_item in stored] == [1, 4]

    def test_find_by_id_with_items(self, repositories, seeded_session):
        loan = open_loan(repositories, 1, date(2025, 3, 1), 2, 5)
        seeded_session.expunge_all()

        found = repositories["loan"].find_by_id_with_items(loan.id)

        assert [loan_item.item.title for loan_item in found.items] == [
            "Effective Java",
            "IEEE Transactions on Computers",
        ]

    def test_find_by_member_id_order_by_loan_date_desc(self, repositories):
        first = open_loan(repositories, 1, date(2025, 3, 1), 1)
        third = open_loan(repositories, 1, date(2025, 3, 10), 2)
        second = open_loan(repositories, 1, date(2025, 3, 5), 3)
        open_loan(repositories, 2, date(2025, 3, 12), 4)

        loans = repositories["loan"].find_by_member_id_order_by_loan_date_desc(1)

        assert [loan.id for loan in loans] == [third.id, second.id, first.id]

    def test_find_by_loan_id_and_item_id(self, repositories):
        loan = open_loan(repositories, 1, date(2025, 3, 1), 1, 4)

        loan_item = repositories["loan_item"].find_by_loan_id_and_item_id(loan.id, 4)

        assert loan_item.item.title == "Nature Neuroscience"
        assert repositories["loan_item"].find_by_loan_id_and_item_id(loan.id, 2) is None

    def test_find_active_items_by_loan_id(self, repositories):
        loan = open_loan(repositories, 1, date(2025, 3, 1), 1, 2, 3)
        loan.items[1].mark_returned(date(2025, 3, 4))
        repositories["loan_item"].save_all(loan.items)

        active = repositories["loan_item"].find_active_items_by_loan_id(loan.id)

        assert [loan_item.item_id for loan_item in active] == [1, 3]
