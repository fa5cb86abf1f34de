"""Transaction lifecycle service."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol, Sequence

from ledger.models.transaction import Currency, Transaction, TransactionStatus
from ledger.schemas.transaction import TransactionCreate, TransactionUpdate
from ledger.services.pagination import (
    Pagination,
    build_pagination,
    clamp_limit,
    normalize_offset,
)
from ledger.store.base import RecordStore, TransactionFilters
from ledger.utils.errors import (
    ConcurrentUpdateError,
    ConstraintViolationError,
    DuplicateExternalIdError,
    InvalidTransitionError,
    TransactionNotFoundError,
)

logger = logging.getLogger(__name__)

STATUS_TRANSITIONS: dict[TransactionStatus, frozenset[TransactionStatus]] = {
    TransactionStatus.PENDING: frozenset({TransactionStatus.PROCESSING, TransactionStatus.FAILED}),
    TransactionStatus.PROCESSING: frozenset({TransactionStatus.COMPLETE, TransactionStatus.FAILED}),
    TransactionStatus.COMPLETE: frozenset(),
    TransactionStatus.FAILED: frozenset(),
}


def is_valid_status_transition(current: TransactionStatus, target: TransactionStatus) -> bool:
    """Return whether ``target`` is reachable from ``current`` in one step."""

    return target in STATUS_TRANSITIONS.get(current, frozenset())


@dataclass(frozen=True)
class TransactionPage:
    transactions: Sequence[Transaction]
    pagination: Pagination


class TransactionLifecycle(Protocol):
    """Operations exposed to the HTTP layer and the webhook processor."""

    def create(self, payload: TransactionCreate) -> Transaction:
        ...

    def get_by_id(self, transaction_id: int) -> Transaction:
        ...

    def list(
        self,
        *,
        status: TransactionStatus | None = None,
        currency: Currency | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> TransactionPage:
        ...

    def update(self, transaction_id: int, updates: TransactionUpdate) -> Transaction:
        ...

    def delete(self, transaction_id: int) -> None:
        ...

    def get_statistics(self) -> dict[str, Any]:
        ...


class TransactionService:
    """Store-backed implementation of :class:`TransactionLifecycle`."""

    def __init__(self, store: RecordStore):
        self.store = store

    def create(self, payload: TransactionCreate) -> Transaction:
        """Create a PENDING transaction, rejecting an external id already in use."""

        existing = self.store.find_active_by_external_id(payload.external_id)
        if existing is not None:
            logger.info(
                "Duplicate external_id rejected",
                extra={"external_id": payload.external_id, "transaction_id": existing.id},
            )
            raise DuplicateExternalIdError(existing)

        fields = {
            "external_id": payload.external_id,
            "amount": payload.amount,
            "currency": payload.currency,
            "type": payload.type,
            "status": TransactionStatus.PENDING,
            "metadata_json": payload.metadata or {},
            "is_active": True,
        }
        try:
            transaction = self.store.insert_transaction(fields)
        except ConstraintViolationError:
            # A concurrent create won the race on the active external_id index.
            existing = self.store.find_active_by_external_id(payload.external_id)
            if existing is None:
                raise
            logger.info(
                "Duplicate external_id detected after race",
                extra={"external_id": payload.external_id, "transaction_id": existing.id},
            )
            raise DuplicateExternalIdError(existing) from None

        logger.info(
            "Transaction created",
            extra={"transaction_id": transaction.id, "external_id": transaction.external_id},
        )
        return transaction

    def get_by_id(self, transaction_id: int) -> Transaction:
        transaction = self.store.find_active_by_id(transaction_id)
        if transaction is None:
            raise TransactionNotFoundError(transaction_id)
        return transaction

    def list(
        self,
        *,
        status: TransactionStatus | None = None,
        currency: Currency | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> TransactionPage:
        effective_limit = clamp_limit(limit)
        effective_offset = normalize_offset(offset)
        rows, total = self.store.scan_active(
            TransactionFilters(status=status, currency=currency),
            effective_offset,
            effective_limit,
        )
        return TransactionPage(
            transactions=rows,
            pagination=build_pagination(effective_limit, effective_offset, total),
        )

    def update(self, transaction_id: int, updates: TransactionUpdate) -> Transaction:
        """Apply a validated status change and/or a metadata merge in one write.

        The write is conditional on the status and row version read here; if
        another caller changed the transaction in between, even only its
        metadata, ``ConcurrentUpdateError`` is raised instead of overwriting
        their change.
        """

        current = self.get_by_id(transaction_id)

        fields: dict[str, Any] = {}
        if updates.status is not None:
            if not is_valid_status_transition(current.status, updates.status):
                logger.info(
                    "Invalid status transition rejected",
                    extra={
                        "transaction_id": transaction_id,
                        "current_status": current.status.value,
                        "requested_status": updates.status.value,
                    },
                )
                raise InvalidTransitionError(current.status, updates.status)
            fields["status"] = updates.status
        if updates.metadata is not None:
            fields["metadata_json"] = {**(current.metadata_json or {}), **updates.metadata}

        if not fields:
            return current

        # The SQL store refreshes `current` in place on re-read.
        previous_status = current.status
        previous_version = current.version
        try:
            updated = self.store.update_if_active(
                transaction_id, previous_status, fields, expected_version=previous_version
            )
        except TransactionNotFoundError:
            latest = self.store.find_active_by_id(transaction_id)
            if latest is None:
                raise
            logger.warning(
                "Conditional transaction update lost a race",
                extra={
                    "transaction_id": transaction_id,
                    "expected_status": previous_status.value,
                    "actual_status": latest.status.value,
                    "expected_version": previous_version,
                    "actual_version": latest.version,
                },
            )
            raise ConcurrentUpdateError(
                transaction_id,
                previous_status,
                latest.status,
                expected_version=previous_version,
                actual_version=latest.version,
            ) from None

        if "status" in fields:
            logger.info(
                "Transaction status updated",
                extra={
                    "transaction_id": transaction_id,
                    "from_status": previous_status.value,
                    "to_status": updated.status.value,
                },
            )
        return updated

    def delete(self, transaction_id: int) -> None:
        """Soft-delete an active transaction."""

        if self.store.soft_delete_if_active(transaction_id) == 0:
            raise TransactionNotFoundError(transaction_id)
        logger.info("Transaction soft-deleted", extra={"transaction_id": transaction_id})

    def is_valid_status_transition(self, current: TransactionStatus, target: TransactionStatus) -> bool:
        return is_valid_status_transition(current, target)

    def get_statistics(self) -> dict[str, Any]:
        """Return the active transaction count, overall and per status."""

        counts = self.store.count_active_by_status()
        by_status = {status: counts.get(status, 0) for status in TransactionStatus}
        return {"total": sum(by_status.values()), "by_status": by_status}


__all__ = [
    "STATUS_TRANSITIONS",
    "TransactionLifecycle",
    "TransactionPage",
    "TransactionService",
    "is_valid_status_transition",
]
