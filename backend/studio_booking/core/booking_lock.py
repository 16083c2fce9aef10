"""
Keyed in-process mutex for the booking critical section.

One lock per (studio, date). Writers for different studios or different
days never wait on each other. Entries are reference counted and dropped
once no thread holds or waits on them.

This lock serializes writers inside one process, which is all SQLite
offers. Multi-process PostgreSQL deployments are additionally serialized by
the row lock taken in BookingRepository.lock_studio_day.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date
import logging
import threading
import time
from typing import Dict, Iterator, List, Optional

from ..monitoring.prometheus_metrics import prometheus_metrics
from .config import settings

logger = logging.getLogger(__name__)

_REGISTRY_LOCK = threading.Lock()
# key -> [lock, refcount]
_LOCKS: Dict[str, List] = {}


def _lock_key(studio: str, booking_date: date) -> str:
    return f"studio:{studio}:{booking_date.isoformat()}:mutex"


def _checkout(key: str) -> threading.Lock:
    with _REGISTRY_LOCK:
        entry = _LOCKS.get(key)
        if entry is None:
            entry = [threading.Lock(), 0]
            _LOCKS[key] = entry
        entry[1] += 1
        return entry[0]


def _checkin(key: str) -> None:
    with _REGISTRY_LOCK:
        entry = _LOCKS.get(key)
        if entry is None:
            return
        entry[1] -= 1
        if entry[1] <= 0:
            del _LOCKS[key]


def acquire_studio_day_lock(
    studio: str, booking_date: date, timeout_s: Optional[float] = None
) -> bool:
    """
    Block until the (studio, date) lock is held or the timeout expires.

    Returns False on timeout. Never fails open.
    """
    key = _lock_key(studio, booking_date)
    timeout = settings.booking_lock_timeout_seconds if timeout_s is None else timeout_s
    lock = _checkout(key)
    started = time.monotonic()
    acquired = lock.acquire(timeout=timeout)
    waited = time.monotonic() - started
    if acquired:
        prometheus_metrics.record_booking_lock("acquire", "success", wait_seconds=waited)
        return True

    _checkin(key)
    prometheus_metrics.record_booking_lock("acquire", "timeout", wait_seconds=waited)
    logger.warning(
        "booking_lock_timeout",
        extra={"studio": studio, "date": booking_date.isoformat(), "waited_s": round(waited, 3)},
    )
    return False


def release_studio_day_lock(studio: str, booking_date: date) -> None:
    key = _lock_key(studio, booking_date)
    with _REGISTRY_LOCK:
        entry = _LOCKS.get(key)
    if entry is None:
        prometheus_metrics.record_booking_lock("release", "not_found")
        return
    entry[0].release()
    _checkin(key)
    prometheus_metrics.record_booking_lock("release", "success")


def held_lock_count() -> int:
    """Number of (studio, date) keys currently held or awaited."""
    with _REGISTRY_LOCK:
        return len(_LOCKS)


@contextmanager
def studio_day_lock(
    studio: str, booking_date: date, timeout_s: Optional[float] = None
) -> Iterator[bool]:
    acquired = acquire_studio_day_lock(studio, booking_date, timeout_s=timeout_s)
    try:
        yield acquired
    finally:
        if acquired:
            release_studio_day_lock(studio, booking_date)
