"""
Member repository implementation for the Lending Library MCP Server.

Members are only looked up during checkout; ``save`` exists for
registration (the seeder and tests).
"""

from sqlalchemy import func, select

from .repository import BaseRepository
from .schema import Member
from .session import safe_query


class MemberRepository(BaseRepository[Member]):
    """Repository for library members."""

    @property
    def model_class(self) -> type[Member]:
        return Member

    def find_by_email(self, email: str) -> Member | None:
        """Find a member by email address (case-insensitive)."""
        query = select(Member).where(func.lower(Member.email) == email.lower())
        return safe_query(
            self.session,
            lambda s: s.execute(query).scalars().first(),
            "Failed to get member by email",
        )

    def count(self) -> int:
        """Number of registered members."""
        return (
            safe_query(
                self.session,
                lambda s: s.execute(select(func.count()).select_from(Member)).scalar(),
                "Failed to count members",
            )
            or 0
        )
