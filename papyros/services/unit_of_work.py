"""
Transaction boundary for the stock engine.

A business operation (sale, reception, adjustment) runs inside exactly one
UnitOfWork: every write it makes (aggregate rows, product stock counters,
ledger entries) is committed together or rolled back together.

run_in_unit_of_work() adds the conflict policy on top: Product rows carry a
version counter, and when a concurrent transaction bumped it between our
read and our write the whole operation is replayed from scratch (fresh
reads, fresh validation). Nothing else is ever retried.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, TypeVar

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from papyros.app.core.config import settings
from papyros.app.core.errors import OperationCancelled, PapyrosError, StockConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class UnitOfWork:
    def __init__(self, db: Session, cancel_event: threading.Event | None = None):
        self.db = db
        self.cancel_event = cancel_event
        self._committed = False

    def __enter__(self) -> "UnitOfWork":
        if not self.db.in_transaction():
            self.db.begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            self.rollback(exc)
            return False

        try:
            self.commit()
        except BaseException as commit_exc:
            self.rollback(commit_exc)
            raise
        return False

    def check_cancelled(self) -> None:
        if self._committed:
            return
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise OperationCancelled()

    def commit(self) -> None:
        # Last point where a cancellation is honoured
        self.check_cancelled()
        self._committed = True
        self.db.commit()

    def rollback(self, exc: BaseException | None = None) -> None:
        self.db.rollback()
        if exc is not None and not isinstance(exc, (PapyrosError, StaleDataError)):
            logger.exception("Transaction rolled back after unexpected error", exc_info=exc)


def run_in_unit_of_work(
    db: Session,
    work: Callable[[UnitOfWork], T],
    *,
    name: str,
    cancel_event: threading.Event | None = None,
    retries: int | None = None,
) -> T:
    """
    Run ``work`` inside a UnitOfWork and commit.

    - domain errors: rolled back, logged, re-raised
    - StaleDataError (optimistic lock lost): rolled back, replayed up to
      ``retries`` times, then StockConflictError
    - anything else: rolled back, re-raised untouched
    """
    max_retries = settings.STOCK_CONFLICT_RETRIES if retries is None else retries
    attempt = 0

    while True:
        try:
            with UnitOfWork(db, cancel_event=cancel_event) as uow:
                return work(uow)
        except StaleDataError as exc:
            attempt += 1
            if attempt > max_retries:
                logger.warning("%s: stock conflict persisted after %d attempts", name, attempt)
                raise StockConflictError(
                    f"{name}: concurrent stock update, please retry",
                    attempts=attempt,
                ) from exc
            logger.warning("%s: concurrent stock update detected, retrying (%d/%d)", name, attempt, max_retries)
        except PapyrosError as exc:
            logger.warning("%s rejected [%s]: %s", name, exc.code, exc.detail)
            raise
