"""In-process record store with the same conditional semantics as the SQL store."""
from __future__ import annotations

import copy
import itertools
import threading
from typing import Any, Mapping, Sequence, TypeVar

from sqlalchemy import inspect

from ledger.models import DEFAULT_EVENT_TYPE, Transaction, TransactionStatus, WebhookEvent
from ledger.store.base import TransactionFilters
from ledger.utils.errors import ConstraintViolationError, TransactionNotFoundError
from ledger.utils.time import utcnow

T = TypeVar("T", Transaction, WebhookEvent)


def _snapshot(instance: T) -> T:
    """Return a detached copy so callers never hold the stored row itself."""

    clone = type(instance)()
    for attr in inspect(type(instance)).column_attrs:
        setattr(clone, attr.key, copy.deepcopy(getattr(instance, attr.key)))
    return clone


class InMemoryRecordStore:
    """Lock-guarded dictionaries standing in for the database.

    Used by unit tests and local tooling; every method holds the lock for its
    whole check-and-write so concurrent callers observe the same outcomes as
    against the SQL store.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._transactions: dict[int, Transaction] = {}
        self._events: dict[str, WebhookEvent] = {}
        self._transaction_ids = itertools.count(1)
        self._event_ids = itertools.count(1)

    def _active(self) -> list[Transaction]:
        return [row for row in self._transactions.values() if row.is_active]

    def find_active_by_external_id(self, external_id: str) -> Transaction | None:
        with self._lock:
            for row in self._active():
                if row.external_id == external_id:
                    return _snapshot(row)
        return None

    def insert_transaction(self, fields: Mapping[str, Any]) -> Transaction:
        with self._lock:
            if any(row.external_id == fields["external_id"] for row in self._active()):
                raise ConstraintViolationError(
                    "Transaction violates a store constraint",
                    {"external_id": fields["external_id"]},
                )
            now = utcnow()
            row = Transaction(
                id=next(self._transaction_ids),
                created_at=now,
                updated_at=now,
                status=fields.get("status", TransactionStatus.PENDING),
                metadata_json=copy.deepcopy(fields.get("metadata_json") or {}),
                is_active=fields.get("is_active", True),
                version=1,
                deleted_at=None,
                external_id=fields["external_id"],
                amount=fields["amount"],
                currency=fields["currency"],
                type=fields["type"],
            )
            self._transactions[row.id] = row
            return _snapshot(row)

    def find_active_by_id(self, transaction_id: int) -> Transaction | None:
        with self._lock:
            row = self._transactions.get(transaction_id)
            if row is None or not row.is_active:
                return None
            return _snapshot(row)

    def scan_active(
        self, filters: TransactionFilters, offset: int, limit: int
    ) -> tuple[Sequence[Transaction], int]:
        with self._lock:
            rows = [
                row
                for row in self._active()
                if (filters.status is None or row.status == filters.status)
                and (filters.currency is None or row.currency == filters.currency)
            ]
            rows.sort(key=lambda row: (row.created_at, row.id), reverse=True)
            window = rows[offset : offset + limit]
            return [_snapshot(row) for row in window], len(rows)

    def update_if_active(
        self,
        transaction_id: int,
        expected_status: TransactionStatus | None,
        fields: Mapping[str, Any],
        expected_version: int | None = None,
    ) -> Transaction:
        with self._lock:
            row = self._transactions.get(transaction_id)
            if (
                row is None
                or not row.is_active
                or (expected_status is not None and row.status != expected_status)
                or (expected_version is not None and row.version != expected_version)
            ):
                raise TransactionNotFoundError(transaction_id)
            updated = _snapshot(row)
            for name, value in fields.items():
                setattr(updated, name, copy.deepcopy(value))
            updated.version = row.version + 1
            updated.updated_at = utcnow()
            self._transactions[transaction_id] = updated
            return _snapshot(updated)

    def soft_delete_if_active(self, transaction_id: int) -> int:
        with self._lock:
            row = self._transactions.get(transaction_id)
            if row is None or not row.is_active:
                return 0
            row.is_active = False
            row.deleted_at = utcnow()
            row.version += 1
            return 1

    def count_active_by_status(self) -> dict[TransactionStatus, int]:
        counts: dict[TransactionStatus, int] = {}
        with self._lock:
            for row in self._active():
                counts[row.status] = counts.get(row.status, 0) + 1
        return counts

    def find_webhook_event_by_id(self, event_id: str) -> WebhookEvent | None:
        with self._lock:
            event = self._events.get(event_id)
            return _snapshot(event) if event is not None else None

    def insert_webhook_event(self, fields: Mapping[str, Any]) -> WebhookEvent:
        with self._lock:
            if fields["event_id"] in self._events:
                raise ConstraintViolationError(
                    "Webhook event already recorded", {"event_id": fields["event_id"]}
                )
            now = utcnow()
            event = WebhookEvent(
                id=next(self._event_ids),
                created_at=now,
                updated_at=now,
                event_id=fields["event_id"],
                transaction_id=fields["transaction_id"],
                event_type=fields.get("event_type") or DEFAULT_EVENT_TYPE,
                payload_json=copy.deepcopy(fields["payload_json"]),
                processed_at=fields.get("processed_at") or now,
            )
            self._events[event.event_id] = event
            return _snapshot(event)

    def list_webhook_events_for_transaction(self, transaction_id: int) -> Sequence[WebhookEvent]:
        with self._lock:
            events = [e for e in self._events.values() if e.transaction_id == transaction_id]
            events.sort(key=lambda e: (e.processed_at, e.id), reverse=True)
            return [_snapshot(e) for e in events]

    # Test helpers -------------------------------------------------------

    def all_transactions(self) -> list[Transaction]:
        """Return every stored transaction, soft-deleted ones included."""

        with self._lock:
            return [_snapshot(row) for row in self._transactions.values()]

    def all_webhook_events(self) -> list[WebhookEvent]:
        with self._lock:
            return [_snapshot(e) for e in self._events.values()]


__all__ = ["InMemoryRecordStore"]
