"""Repository for studios."""

from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.studio import Studio
from .base_repository import BaseRepository


class StudioRepository(BaseRepository[Studio]):
    def __init__(self, db: Session) -> None:
        super().__init__(db, Studio)

    def get_by_name(self, name: str) -> Optional[Studio]:
        return self.find_one_by(name=name)

    def list_studios(self, include_inactive: bool = False) -> List[Studio]:
        try:
            query = self.db.query(Studio)
            if not include_inactive:
                query = query.filter(Studio.is_active.is_(True))
            return query.order_by(Studio.name).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing studios: {str(e)}")
            raise RepositoryException(f"Failed to list studios: {str(e)}") from e
