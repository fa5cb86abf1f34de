"""Record store contract the lifecycle services are written against."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Protocol, Sequence

from ledger.models import Currency, Transaction, TransactionStatus, WebhookEvent


@dataclass(frozen=True)
class TransactionFilters:
    """Equality filters applied on top of the active-row scan."""

    status: TransactionStatus | None = None
    currency: Currency | None = None


class RecordStore(Protocol):
    """Durable keyed storage for transactions and webhook events.

    Every read of transactions only sees active rows. Writes that depend on
    current state (``update_if_active``, ``soft_delete_if_active``) are
    single conditional statements, so the check and the write cannot be
    interleaved by a concurrent caller.
    """

    def find_active_by_external_id(self, external_id: str) -> Transaction | None:
        ...

    def insert_transaction(self, fields: Mapping[str, Any]) -> Transaction:
        """Insert a transaction; raise ``ConstraintViolationError`` on a uniqueness conflict."""
        ...

    def find_active_by_id(self, transaction_id: int) -> Transaction | None:
        ...

    def scan_active(
        self, filters: TransactionFilters, offset: int, limit: int
    ) -> tuple[Sequence[Transaction], int]:
        """Return one window ordered by creation time (newest first) and the filtered total."""
        ...

    def update_if_active(
        self,
        transaction_id: int,
        expected_status: TransactionStatus | None,
        fields: Mapping[str, Any],
        expected_version: int | None = None,
    ) -> Transaction:
        """Apply ``fields`` only if the row is active, still in ``expected_status``
        and, when given, still at ``expected_version``. Bumps ``version``.

        Raises ``TransactionNotFoundError`` when no row matched.
        """
        ...

    def soft_delete_if_active(self, transaction_id: int) -> int:
        """Deactivate the row and stamp ``deleted_at``; return the number of rows changed."""
        ...

    def count_active_by_status(self) -> dict[TransactionStatus, int]:
        ...

    def find_webhook_event_by_id(self, event_id: str) -> WebhookEvent | None:
        ...

    def insert_webhook_event(self, fields: Mapping[str, Any]) -> WebhookEvent:
        """Insert an event; raise ``ConstraintViolationError`` if the event id exists."""
        ...

    def list_webhook_events_for_transaction(self, transaction_id: int) -> Sequence[WebhookEvent]:
        ...


__all__ = ["RecordStore", "TransactionFilters"]
