# backend/studio_booking/services/studio_service.py
"""Studio catalog service."""

import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from ..core.constants import DEFAULT_STUDIOS
from ..core.exceptions import NotFoundException
from ..models.studio import Studio
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


class StudioService(BaseService):
    def __init__(self, db: Session) -> None:
        super().__init__(db)
        self.repository = RepositoryFactory.create_studio_repository(db)

    @BaseService.measure_operation("list_studios")
    def list_studios(self, include_inactive: bool = False) -> List[Studio]:
        return self.repository.list_studios(include_inactive=include_inactive)

    def get_studio(self, name: str) -> Studio:
        studio = self.repository.get_by_name(name)
        if studio is None:
            raise NotFoundException(
                f"Studio '{name}' not found", code="studio_not_found", details={"studio": name}
            )
        return studio

    def seed_default_studios(
        self, catalog: Optional[Sequence[Dict[str, Any]]] = None
    ) -> int:
        """Insert catalog studios that do not exist yet. Returns the number created."""
        created = 0
        with self.transaction():
            for entry in catalog if catalog is not None else DEFAULT_STUDIOS:
                if self.repository.get_by_name(entry["name"]) is not None:
                    continue
                self.repository.create(**entry)
                created += 1
        if created:
            logger.info("Seeded %d studio(s)", created)
        return created
