"""Compensating-action saga for multi-step writes.

Each forward step commits on its own. When a step fails, the session is
rolled back and every compensation registered so far runs in reverse, so
the caller sees either the whole operation or none of it.
"""
import logging
from typing import Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from venueflow.services.errors import PartialFailure, StoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Saga:
    def __init__(self, db: Session, name: str):
        self.db = db
        self.name = name
        self.event_id: str | None = None
        self._committed_steps = 0
        self._compensations: list[tuple[str, Callable[[], None]]] = []

    def run(self, action: Callable[[], T], *, failure: str) -> T:
        """Execute one forward step; ``failure`` prefixes the error message."""
        try:
            result = action()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("%s: step failed (%s): %s", self.name, failure, exc)
            committed = self._committed_steps > 0
            self.compensate()
            message = f"{failure}: {exc}"
            if committed:
                raise PartialFailure(message, event_id=self.event_id, rolled_back=True) from exc
            raise StoreError(message) from exc
        self._committed_steps += 1
        return result

    def on_rollback(self, label: str, compensation: Callable[[], None]) -> None:
        self._compensations.append((label, compensation))

    def compensate(self) -> None:
        """Run compensations newest-first; a failing one never stops the rest."""
        while self._compensations:
            label, compensation = self._compensations.pop()
            try:
                compensation()
                self.db.commit()
                logger.info("%s: compensated '%s'", self.name, label)
            except SQLAlchemyError:
                self.db.rollback()
                logger.exception("%s: compensation '%s' failed; manual reconciliation needed", self.name, label)
