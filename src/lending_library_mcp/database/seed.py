"""
Sample catalog and members for the Lending Library MCP Server.

A fresh database is useless for trying out checkouts, so the server seeds
a small catalog (three books, two journals) and three members on startup
when ``seed_on_startup`` is set. Seeding is skipped once members exist.

Larger data sets for manual testing can be requested with ``extra_members``
and ``extra_books``; those rows are generated with Faker from a fixed seed,
so every run produces the same library.
"""

import logging
from datetime import date

from faker import Faker
from sqlalchemy.orm import Session

from .item_repository import LibraryItemRepository
from .member_repository import MemberRepository
from .schema import ItemTypeEnum, LibraryItem, Member

logger = logging.getLogger(__name__)

SAMPLE_BOOKS = [
    {
        "title": "Clean Code",
        "author": "Robert C. Martin",
        "publication_date": date(2008, 8, 1),
        "isbn": "9780132350884",
        "genre": "Programming",
        "page_count": 464,
    },
    {
        "title": "Effective Java",
        "author": "Joshua Bloch",
        "publication_date": date(2018, 1, 6),
        "isbn": "9780134685991",
        "genre": "Programming",
        "page_count": 416,
    },
    {
        "title": "The Pragmatic Programmer",
        "author": "Andrew Hunt",
        "publication_date": date(1999, 10, 30),
        "isbn": "9780201616224",
        "genre": "Software Engineering",
        "page_count": 352,
    },
]

SAMPLE_JOURNALS = [
    {
        "title": "Nature Neuroscience",
        "author": "Various",
        "publication_date": date(2024, 5, 10),
        "issn": "1234-5678",
        "publisher": "Nature Publishing Group",
        "volume": 29,
        "issue": 5,
    },
    {
        "title": "IEEE Transactions on Computers",
        "author": "Various",
        "publication_date": date(2023, 11, 20),
        "issn": "0018-9340",
        "publisher": "IEEE",
        "volume": 72,
        "issue": 11,
    },
]

SAMPLE_MEMBERS = [
    {"first_name": "Alice", "last_name": "Johnson", "email": "alice@example.com"},
    {"first_name": "Bob", "last_name": "Williams", "email": "bob@example.com"},
    {"first_name": "Charlie", "last_name": "Davis", "email": "charlie@example.com"},
]


GENERATED_GENRES = ["Fiction", "Mystery", "Science", "History", "Biography", "Programming"]


def generate_isbn13(fake: Faker) -> str:
    """Generate a valid ISBN-13 number."""
    group = fake.random_int(0, 9)
    digits = f"978{group}{fake.random_int(1000, 9999)}{fake.random_int(1000, 9999)}"
    total = sum(int(digit) * (3 if i % 2 else 1) for i, digit in enumerate(digits))
    check_digit = (10 - (total % 10)) % 10
    return f"{digits}{check_digit}"


def generate_members(fake: Faker, count: int) -> list[Member]:
    """Members with unique addresses on the example.org domain."""
    members = []
    for n in range(1, count + 1):
        members.append(
            Member(
                first_name=fake.first_name(),
                last_name=fake.last_name(),
                email=f"{fake.user_name()}.{n}@example.org",
            )
        )
    return members


def generate_books(fake: Faker, count: int) -> list[LibraryItem]:
    return [
        LibraryItem(
            item_type=ItemTypeEnum.BOOK,
            title=fake.catch_phrase().title(),
            author=fake.name(),
            publication_date=fake.date_between(start_date="-40y", end_date="today"),
            isbn=generate_isbn13(fake),
            genre=fake.random_element(GENERATED_GENRES),
            page_count=fake.random_int(80, 900),
        )
        for _ in range(count)
    ]


def seed_library(session: Session, extra_members: int = 0, extra_books: int = 0) -> bool:
    """
    Insert the sample catalog and members.

    The fixed samples always come first, so their ids are stable: books
    1-3, journals 4-5 and members 1-3. Generated rows follow them.

    Args:
        session: Session to add the rows to; the caller commits
        extra_members: Number of generated members to add
        extra_books: Number of generated books to add

    Returns:
        True if data was inserted, False if the database already had members
    """
    members = MemberRepository(session)
    if members.count() > 0:
        logger.info("Database already has members, skipping seed")
        return False

    fake = Faker()
    fake.seed_instance(42)

    items = LibraryItemRepository(session)
    items.save_all(LibraryItem(item_type=ItemTypeEnum.BOOK, **book) for book in SAMPLE_BOOKS)
    items.save_all(
        LibraryItem(item_type=ItemTypeEnum.JOURNAL, **journal) for journal in SAMPLE_JOURNALS
    )
    members.save_all(Member(**member) for member in SAMPLE_MEMBERS)

    if extra_books:
        items.save_all(generate_books(fake, extra_books))
    if extra_members:
        members.save_all(generate_members(fake, extra_members))

    logger.info(
        "Seeded %d items and %d members",
        len(SAMPLE_BOOKS) + len(SAMPLE_JOURNALS) + extra_books,
        len(SAMPLE_MEMBERS) + extra_members,
    )
    return True
