# backend/app/repositories/base_repository.py
"""
Shared plumbing for the Sideout repositories.

Repositories never commit: services own the transaction boundary through
``BaseService.transaction()``. Driver errors are wrapped in
RepositoryException (surfaced as 503) except IntegrityError, which is left
alone so services can turn a unique-index hit (a taken slot, a second review
for the same lesson) into a domain conflict.
"""

import logging
from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import RepositoryException

ModelT = TypeVar("ModelT")

logger = logging.getLogger(__name__)


class BaseRepository(Generic[ModelT]):
    """
    Primary-key lookup and inserts for one mapped model.

    Query methods specific to a table live on the subclass.
    """

    def __init__(self, db: Session, model: Type[ModelT]):
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    @property
    def _name(self) -> str:
        return self.model.__name__

    def _fail(self, action: str, error: SQLAlchemyError) -> RepositoryException:
        self.logger.error(f"{self._name} {action} failed: {str(error)}")
        return RepositoryException(f"Failed to {action} {self._name}: {str(error)}")

    def get_by_id(self, id: str) -> Optional[ModelT]:
        try:
            return self.db.get(self.model, id)
        except SQLAlchemyError as e:
            raise self._fail("load", e)

    def create(self, **fields: Any) -> ModelT:
        """Insert and flush so generated ids and defaults are populated."""
        entity = self.model(**fields)
        try:
            self.db.add(entity)
            self.db.flush()
        except IntegrityError:
            self.logger.warning(f"Integrity error inserting {self._name}")
            raise
        except SQLAlchemyError as e:
            raise self._fail("create", e)
        return entity

    def flush(self) -> None:
        self.db.flush()

    def _execute_scalar(self, query: Query) -> Any:
        try:
            return query.scalar()
        except SQLAlchemyError as e:
            raise self._fail("aggregate", e)
