"""
Repository pattern implementation for the Lending Library MCP Server.

Repositories are the persistence gateway of the loan service. They hide
SQLAlchemy from the domain logic and expose the handful of lookups the
checkout and return rules need:

1. **Separation**: the service states business rules; repositories know
   how to query for them
2. **Unit of work**: ``save`` adds and flushes (assigning ids and checking
   constraints) but never commits; the caller's ``session_scope()`` decides
3. **Live rows**: lookups return mapped rows so the service can mutate them
   inside the current transaction; snapshots are built from them afterwards

The base repository provides id lookups and saving; the entity repositories
add the domain-specific queries.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .schema import Base
from .session import safe_flush, safe_query

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(ABC, Generic[ModelType]):
    """
    Abstract base repository providing common lookups.

    All queries go through ``safe_query`` and all writes through
    ``safe_flush`` so database failures surface as ``RepositoryException``.
    """

    def __init__(self, session: Session):
        """Initialize repository with database session."""
        self.session = session

    @property
    @abstractmethod
    def model_class(self) -> type[ModelType]:
        """Return the SQLAlchemy model class."""

    def find_by_id(self, id: int | None) -> ModelType | None:
        """
        Get entity by ID.

        Returns:
            The mapped row, or None if not found (or ``id`` is None)
        """
        if id is None:
            return None

        return safe_query(
            self.session,
            lambda s: s.get(self.model_class, id),
            f"Failed to get {self.model_class.__name__} by ID",
        )

    def exists_by_id(self, id: int | None) -> bool:
        """Check if an entity exists by ID."""
        if id is None:
            return False

        query = (
            select(func.count()).select_from(self.model_class).where(self.model_class.id == id)
        )
        count = safe_query(
            self.session, lambda s: s.execute(query).scalar(), "Failed to check existence"
        )
        return bool(count)

    def save(self, entity: ModelType) -> ModelType:
        """
        Add the entity to the session and flush it.

        Returns:
            The same entity, with its id assigned

        Raises:
            DuplicateError: If a unique or check constraint is violated
            RepositoryException: On other database errors
        """
        self.session.add(entity)
        safe_flush(self.session, f"save {self.model_class.__name__}")
        return entity

    def save_all(self, entities: Iterable[ModelType]) -> list[ModelType]:
        """Add and flush several entities in one round trip."""
        entities = list(entities)
        self.session.add_all(entities)
        safe_flush(self.session, f"save {len(entities)} {self.model_class.__name__} rows")
        return entities
