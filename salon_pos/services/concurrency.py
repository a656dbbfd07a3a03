"""Serialization and atomicity helpers for stock mutations.

Every operation that changes a product's stock runs as::

    return run_atomic(db, op, product_id=product_id)

where ``op`` re-reads the product through ``lock_for_update`` and finishes with
``db.commit()``. Each attempt holds the in-process lock for that product id, the row
lock covers databases that honour ``SELECT ... FOR UPDATE`` and the product's
``version`` column catches anything that still slips through (other processes).
The backoff between attempts runs with the in-process lock released.
"""

import logging
import threading
import time
import weakref
from contextlib import contextmanager, nullcontext
from typing import Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from salon_pos.config import settings
from salon_pos.exceptions import ConcurrencyConflictError, SalonError, StorageFault

logger = logging.getLogger(__name__)

T = TypeVar("T")

_registry_lock = threading.Lock()
# Entries live only while some caller holds a reference to the lock
_product_locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()


def _get_lock(product_id: str) -> threading.Lock:
    with _registry_lock:
        lock = _product_locks.get(product_id)
        if lock is None:
            lock = threading.Lock()
            _product_locks[product_id] = lock
        return lock


@contextmanager
def product_lock(product_id: str):
    """Hold the process-wide lock for one product id."""
    lock = _get_lock(product_id)
    with lock:
        yield


def lock_for_update(query):
    """
    Apply row-level locking to the re-read of a product.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


def run_atomic(
    db: Session,
    op: Callable[[], T],
    *,
    product_id: str | None = None,
    attempts: int | None = None,
    backoff_base: float | None = None,
) -> T:
    """
    Run ``op`` as one all-or-nothing unit of work.

    With ``product_id`` each attempt runs under ``product_lock(product_id)``.
    Rolls back on any failure. Optimistic-lock conflicts (StaleDataError) are
    retried with exponential backoff and surface as ConcurrencyConflictError once
    the attempts run out; other database errors surface as StorageFault.
    """
    attempts = attempts or settings.CONFLICT_RETRY_ATTEMPTS
    backoff_base = settings.CONFLICT_RETRY_BACKOFF if backoff_base is None else backoff_base

    for attempt in range(attempts):
        with product_lock(product_id) if product_id else nullcontext():
            try:
                return op()
            except StaleDataError as exc:
                db.rollback()
                if attempt >= attempts - 1:
                    logger.warning("Giving up after %d conflicting attempts: %s", attempts, exc)
                    raise ConcurrencyConflictError(
                        "Product was modified concurrently, please retry"
                    ) from exc
                logger.warning("Concurrent update detected (attempt %d/%d), retrying", attempt + 1, attempts)
            except SalonError:
                db.rollback()
                raise
            except SQLAlchemyError as exc:
                db.rollback()
                logger.error("Storage failure, transaction rolled back: %s", exc)
                raise StorageFault(f"Storage failure: {exc}") from exc
            except Exception:
                db.rollback()
                raise
        time.sleep(backoff_base * (2 ** attempt))
    raise ConcurrencyConflictError("Product was modified concurrently, please retry")
