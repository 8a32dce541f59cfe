"""Test configuration and fixtures for the Lending Library MCP Server.

1. Isolated databases - every test gets a fresh in-memory SQLite database
2. Sample data - the seeded catalog (books 1-3, journals 4-5, members 1-3)
3. A controllable clock - loan and return dates do not depend on today
4. Configuration isolation - global config and env vars are reset
"""

import os
from collections.abc import Generator
from datetime import date, timedelta
from pathlib import Path

import pytest
from sqlalchemy.orm import Session

from lending_library_mcp.config import ServerConfig, reset_config
from lending_library_mcp.database import (
    DatabaseManager,
    get_db_manager,
    reset_db_manager,
    seed_library,
)
from lending_library_mcp.services import LoanService


class FakeClock:
    """Stands in for ``date.today`` so loan dates are predictable."""

    def __init__(self, today: date):
        self.today = today

    def __call__(self) -> date:
        return self.today

    def advance(self, days: int) -> None:
        self.today += timedelta(days=days)


# === Database Fixtures ===


@pytest.fixture
def db_manager() -> Generator[DatabaseManager, None, None]:
    """Global database manager backed by an in-memory SQLite database.

    The manager is installed as the process-wide instance so code using the
    module-level ``session_scope()`` (the tool handlers) sees the same data.
    """
    reset_db_manager()
    manager = get_db_manager("sqlite:///:memory:")
    manager.init_database()

    yield manager

    reset_db_manager()


@pytest.fixture
def db_session(db_manager: DatabaseManager) -> Generator[Session, None, None]:
    """A session on the test database, rolled back afterwards."""
    session = db_manager.create_session()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def seeded_session(db_session: Session) -> Session:
    """A session whose database holds the sample catalog and members."""
    seed_library(db_session)
    return db_session


@pytest.fixture
def seeded_db(db_manager: DatabaseManager) -> DatabaseManager:
    """The global database with the sample data committed."""
    with db_manager.session_scope() as session:
        seed_library(session)
    return db_manager


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(date(2025, 3, 1))


@pytest.fixture
def service(seeded_session: Session, clock: FakeClock) -> LoanService:
    """Loan service over the seeded session with a fixed clock."""
    return LoanService.from_session(seeded_session, today=clock)


# === Configuration Fixtures ===


@pytest.fixture
def test_db_path(tmp_path: Path) -> Path:
    return tmp_path / "test_library.db"


@pytest.fixture
def test_config(test_db_path: Path) -> Generator[ServerConfig, None, None]:
    """A test-specific server configuration."""
    reset_config()

    config = ServerConfig(
        server_name="test-lending-library",
        server_version="0.0.1-test",
        database_path=test_db_path,
        debug=True,
        log_level="DEBUG",
        seed_on_startup=False,
    )

    yield config

    reset_config()


# === Environment Fixtures ===


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Provide a clean environment without LENDING_LIBRARY_* variables."""
    original_env = os.environ.copy()

    for key in list(os.environ.keys()):
        if key.startswith("LENDING_LIBRARY_"):
            del os.environ[key]

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture(autouse=True)
def cleanup_after_test():
    """Reset the global configuration after each test."""
    yield
    reset_config()
