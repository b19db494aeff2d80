"""Base repository with a shared lookup and storage error translation.

Subclasses specify model_class and id_column; the base provides the
optional lookup. ``translate_storage_errors`` is the single
place where SQLAlchemy exceptions are turned into the corpus taxonomy, so
no storage-engine type crosses a repository boundary.
"""

import logging
from contextlib import contextmanager
from typing import TypeVar, Generic, Optional, Type, Callable

import sqlalchemy.exc
from sqlalchemy.orm import Session, Query

from ..database import Base
from ..exceptions import CorpusError, UnavailableError

ModelT = TypeVar("ModelT", bound=Base)

logger = logging.getLogger(__name__)


@contextmanager
def translate_storage_errors(
    operation: str,
    on_integrity_error: Optional[Callable[[sqlalchemy.exc.IntegrityError], CorpusError]] = None,
):
    """Translate SQLAlchemy exceptions raised inside the block.

    Integrity violations are handed to *on_integrity_error* when given
    (e.g. to report a duplicate slug). Every other storage failure becomes
    ``UnavailableError``; retrying is left to the caller.
    """
    try:
        yield
    except sqlalchemy.exc.IntegrityError as e:
        if on_integrity_error is not None:
            raise on_integrity_error(e) from e
        logger.error("Integrity error during %s", operation, exc_info=True)
        raise UnavailableError(f"Storage rejected {operation}", original_error=e) from e
    except sqlalchemy.exc.SQLAlchemyError as e:
        logger.error("Storage error during %s", operation, exc_info=True)
        raise UnavailableError(f"Storage unavailable during {operation}", original_error=e) from e


class BaseRepository(Generic[ModelT]):
    """Shared repository logic for SQLAlchemy models.

    Class variables to set in subclasses:
        model_class:     The SQLAlchemy model (e.g., Post)
        id_column:       Name of the lookup column (default "id")
    """

    model_class: Type[ModelT]
    id_column: str = "id"

    def __init__(self, db: Session):
        self.db = db

    def _base_query(self) -> Query:
        """Base query for get_by_id_optional."""
        return self.db.query(self.model_class)

    def get_by_id_optional(self, entity_id) -> Optional[ModelT]:
        """Get entity by lookup column, or None if not found."""
        col = getattr(self.model_class, self.id_column)
        with translate_storage_errors(f"{self.model_class.__tablename__} lookup"):
            return self._base_query().filter(col == entity_id).first()
