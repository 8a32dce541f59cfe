"""
Library item repository implementation for the Lending Library MCP Server.

This repository backs the availability side of checkout:

1. **Availability lookups**: ``find_available_by_id`` returns an item only
   while it is on the shelf, and locks the row so two concurrent checkouts
   cannot both claim it
2. **Catalog browsing**: available items, optionally by variant, and title
   search
"""

from sqlalchemy import select

from .repository import BaseRepository
from .schema import ItemTypeEnum, LibraryItem
from .session import safe_query


class LibraryItemRepository(BaseRepository[LibraryItem]):
    """Repository for books and journals."""

    @property
    def model_class(self) -> type[LibraryItem]:
        return LibraryItem

    def find_available_by_id(self, id: int | None) -> LibraryItem | None:
        """
        Get an item only if it is currently available.

        The row is selected ``FOR UPDATE``; on backends with row locks the
        lock is held until the surrounding transaction ends, which serializes
        concurrent checkouts of the same item. SQLite ignores the clause and
        serializes writers itself.

        Returns:
            The item, or None if it does not exist or is on loan
        """
        if id is None:
            return None

        query = (
            select(LibraryItem)
            .where(LibraryItem.id == id, LibraryItem.available.is_(True))
            .with_for_update()
        )
        return safe_query(
            self.session,
            lambda s: s.execute(query).scalar_one_or_none(),
            "Failed to get available item",
        )

    def find_available_items(self, item_type: ItemTypeEnum | None = None) -> list[LibraryItem]:
        """
        List items that can be checked out.

        Args:
            item_type: Restrict to books or journals
        """
        query = select(LibraryItem).where(LibraryItem.available.is_(True))
        if item_type is not None:
            query = query.where(LibraryItem.item_type == item_type)
        query = query.order_by(LibraryItem.id)

        return list(
            safe_query(
                self.session,
                lambda s: s.execute(query).scalars().all(),
                "Failed to list available items",
            )
        )

    def find_by_title_containing(self, title: str) -> list[LibraryItem]:
        """Case-insensitive partial title match."""
        query = (
            select(LibraryItem)
            .where(LibraryItem.title.ilike(f"%{title}%"))
            .order_by(LibraryItem.id)
        )
        return list(
            safe_query(
                self.session,
                lambda s: s.execute(query).scalars().all(),
                "Failed to search items by title",
            )
        )
