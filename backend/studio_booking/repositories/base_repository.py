# backend/studio_booking/repositories/base_repository.py
"""
Shared data access for the booking store.

Repositories flush but never commit on their own. The caller owns the
transaction, either through BaseService.transaction() (errors mapped to
ServiceException) or through BaseRepository.transaction() below, which
lets the raw SQLAlchemy error through so the booking critical section can
tell a lock timeout from other store failures.
"""

from contextlib import contextmanager
import logging
from typing import Any, Generic, Iterator, NoReturn, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException

T = TypeVar("T")

logger = logging.getLogger(__name__)


class BaseRepository(Generic[T]):
    """Single-table access bound to one session and one mapped model."""

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    @property
    def dialect_name(self) -> str:
        """Name of the bound dialect, e.g. ``postgresql`` or ``sqlite``."""
        return self.db.get_bind().dialect.name

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Commit on success, roll back and re-raise unchanged on any error."""
        try:
            yield self.db
            self.db.commit()
        except Exception as exc:
            if isinstance(exc, SQLAlchemyError):
                self.logger.error("Store transaction rolled back: %s", exc)
            self.db.rollback()
            raise

    def _fail(self, action: str, exc: SQLAlchemyError) -> NoReturn:
        name = self.model.__name__
        self.logger.error("Could not %s %s: %s", action, name, exc)
        if isinstance(exc, IntegrityError):
            raise RepositoryException(f"Integrity constraint violated on {name}: {exc}") from exc
        raise RepositoryException(f"Could not {action} {name}: {exc}") from exc

    def get_by_id(self, id: str) -> Optional[T]:
        try:
            return self.db.get(self.model, id)
        except SQLAlchemyError as exc:
            self._fail("read", exc)

    def find_one_by(self, **criteria: Any) -> Optional[T]:
        """First row whose columns equal ``criteria``, or None."""
        try:
            return self.db.query(self.model).filter_by(**criteria).first()
        except SQLAlchemyError as exc:
            self._fail("look up", exc)

    def create(self, **fields: Any) -> T:
        """Add a row and flush so defaults (ids, timestamps) are populated."""
        try:
            entity = self.model(**fields)
            self.db.add(entity)
            self.db.flush()
            return entity
        except SQLAlchemyError as exc:
            self._fail("create", exc)

    def delete(self, id: str) -> bool:
        """Remove a row by primary key. False when no such row exists."""
        try:
            entity = self.db.get(self.model, id)
            if entity is None:
                return False
            self.db.delete(entity)
            self.db.flush()
            return True
        except SQLAlchemyError as exc:
            self._fail("delete", exc)
