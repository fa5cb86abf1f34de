"""SQLAlchemy-backed record store."""
from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Mapping, Sequence

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.orm import Session

from ledger.models import Transaction, TransactionStatus, WebhookEvent
from ledger.store.base import TransactionFilters
from ledger.utils.errors import (
    ConstraintViolationError,
    StoreUnavailableError,
    TransactionNotFoundError,
)
from ledger.utils.time import utcnow

logger = logging.getLogger(__name__)

_ACTIVE = Transaction.is_active.is_(True)


class SqlRecordStore:
    """Record store working on a caller-owned SQLAlchemy session.

    Each mutating call commits its own unit of work.
    """

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _store_errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except (OperationalError, InterfaceError) as exc:
            self.db.rollback()
            logger.error("Record store unavailable", extra={"operation": operation}, exc_info=True)
            raise StoreUnavailableError(
                "Record store unavailable", {"operation": operation}
            ) from exc

    def find_active_by_external_id(self, external_id: str) -> Transaction | None:
        stmt = (
            select(Transaction)
            .where(Transaction.external_id == external_id, _ACTIVE)
            .execution_options(populate_existing=True)
        )
        with self._store_errors("find_active_by_external_id"):
            return self.db.scalars(stmt).one_or_none()

    def insert_transaction(self, fields: Mapping[str, Any]) -> Transaction:
        transaction = Transaction(**fields)
        with self._store_errors("insert_transaction"):
            try:
                self.db.add(transaction)
                self.db.commit()
            except IntegrityError as exc:
                self.db.rollback()
                raise ConstraintViolationError(
                    "Transaction violates a store constraint",
                    {"external_id": fields.get("external_id")},
                ) from exc
            self.db.refresh(transaction)
        return transaction

    def find_active_by_id(self, transaction_id: int) -> Transaction | None:
        stmt = (
            select(Transaction)
            .where(Transaction.id == transaction_id, _ACTIVE)
            .execution_options(populate_existing=True)
        )
        with self._store_errors("find_active_by_id"):
            return self.db.scalars(stmt).one_or_none()

    def scan_active(
        self, filters: TransactionFilters, offset: int, limit: int
    ) -> tuple[Sequence[Transaction], int]:
        conditions: list[Any] = [_ACTIVE]
        if filters.status is not None:
            conditions.append(Transaction.status == filters.status)
        if filters.currency is not None:
            conditions.append(Transaction.currency == filters.currency)

        count_stmt = select(func.count()).select_from(Transaction).where(*conditions)
        page_stmt = (
            select(Transaction)
            .where(*conditions)
            .order_by(Transaction.created_at.desc(), Transaction.id.desc())
            .offset(offset)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        with self._store_errors("scan_active"):
            total = self.db.scalar(count_stmt) or 0
            rows = self.db.scalars(page_stmt).all()
        return list(rows), total

    def update_if_active(
        self,
        transaction_id: int,
        expected_status: TransactionStatus | None,
        fields: Mapping[str, Any],
        expected_version: int | None = None,
    ) -> Transaction:
        conditions = [Transaction.id == transaction_id, _ACTIVE]
        if expected_status is not None:
            conditions.append(Transaction.status == expected_status)
        if expected_version is not None:
            conditions.append(Transaction.version == expected_version)
        values = {getattr(Transaction, name): value for name, value in fields.items()}
        values[Transaction.version] = Transaction.version + 1
        stmt = (
            update(Transaction)
            .where(*conditions)
            .values(values)
            .execution_options(synchronize_session=False)
        )
        with self._store_errors("update_if_active"):
            result = self.db.execute(stmt)
            if result.rowcount == 0:
                self.db.rollback()
                raise TransactionNotFoundError(transaction_id)
            self.db.commit()
            updated = self.find_active_by_id(transaction_id)
        if updated is None:
            raise TransactionNotFoundError(transaction_id)
        return updated

    def soft_delete_if_active(self, transaction_id: int) -> int:
        stmt = (
            update(Transaction)
            .where(Transaction.id == transaction_id, _ACTIVE)
            .values(
                {
                    Transaction.is_active: False,
                    Transaction.deleted_at: utcnow(),
                    Transaction.version: Transaction.version + 1,
                }
            )
            .execution_options(synchronize_session=False)
        )
        with self._store_errors("soft_delete_if_active"):
            result = self.db.execute(stmt)
            self.db.commit()
        return result.rowcount

    def count_active_by_status(self) -> dict[TransactionStatus, int]:
        stmt = (
            select(Transaction.status, func.count())
            .where(_ACTIVE)
            .group_by(Transaction.status)
        )
        with self._store_errors("count_active_by_status"):
            rows = self.db.execute(stmt).all()
        return {status: count for status, count in rows}

    def find_webhook_event_by_id(self, event_id: str) -> WebhookEvent | None:
        stmt = select(WebhookEvent).where(WebhookEvent.event_id == event_id)
        with self._store_errors("find_webhook_event_by_id"):
            return self.db.scalars(stmt).one_or_none()

    def insert_webhook_event(self, fields: Mapping[str, Any]) -> WebhookEvent:
        event = WebhookEvent(**fields)
        with self._store_errors("insert_webhook_event"):
            try:
                self.db.add(event)
                self.db.commit()
            except IntegrityError as exc:
                self.db.rollback()
                raise ConstraintViolationError(
                    "Webhook event already recorded",
                    {"event_id": fields.get("event_id")},
                ) from exc
            self.db.refresh(event)
        return event

    def list_webhook_events_for_transaction(self, transaction_id: int) -> Sequence[WebhookEvent]:
        stmt = (
            select(WebhookEvent)
            .where(WebhookEvent.transaction_id == transaction_id)
            .order_by(WebhookEvent.processed_at.desc(), WebhookEvent.id.desc())
        )
        with self._store_errors("list_webhook_events_for_transaction"):
            return list(self.db.scalars(stmt).all())


__all__ = ["SqlRecordStore"]
