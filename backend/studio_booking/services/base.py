# backend/studio_booking/services/base.py
"""
Service layer base class.

Services own the transaction boundary and business rules; repositories
below them only read and flush. Every public service operation is timed
through @BaseService.measure_operation and exported to Prometheus.
"""

from contextlib import contextmanager
from functools import wraps
import logging
import time
from typing import Any, Callable, Iterator, Optional, TypeVar, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import ServiceException
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

SLOW_OPERATION_SECONDS = 1.0


class BaseService:
    def __init__(self, db: Session):
        self.db = db
        self.logger = logging.getLogger(self.__class__.__name__)

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Commit the session when the block exits cleanly.

        Store errors are rolled back and surfaced as ServiceException;
        domain errors are rolled back and re-raised as they are.
        """
        try:
            yield self.db
            self.db.commit()
        except SQLAlchemyError as exc:
            self.logger.error("Transaction failed, rolling back: %s", exc)
            self.db.rollback()
            raise ServiceException(f"Database operation failed: {exc}") from exc
        except Exception as exc:
            self.logger.debug("Transaction rolled back after %s", type(exc).__name__)
            self.db.rollback()
            raise

    @staticmethod
    def measure_operation(operation_name: str) -> Callable[[F], F]:
        """
        Time a service method and record the outcome.

            @BaseService.measure_operation("create_booking")
            def create_booking(self, ...):
                ...
        """

        def decorator(func: F) -> F:
            @wraps(func)
            def wrapper(self: "BaseService", *args: Any, **kwargs: Any) -> Any:
                started = time.perf_counter()
                error_type: Optional[str] = None
                try:
                    return func(self, *args, **kwargs)
                except Exception as exc:
                    error_type = type(exc).__name__
                    raise
                finally:
                    elapsed = time.perf_counter() - started
                    if elapsed > SLOW_OPERATION_SECONDS:
                        self.logger.warning("Slow operation %s took %.2fs", operation_name, elapsed)
                    prometheus_metrics.record_service_operation(
                        service=self.__class__.__name__,
                        operation=operation_name,
                        duration=elapsed,
                        status="error" if error_type else "success",
                        error_type=error_type,
                    )

            return cast(F, wrapper)

        return decorator

    def log_operation(self, operation: str, **context: Any) -> None:
        """Info-level audit line; ``context`` lands in the record's extras."""
        self.logger.info("Operation: %s", operation, extra={"operation": operation, **context})
