"""Idempotent processing of inbound transaction webhooks."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Sequence

from ledger.models.webhook_event import WebhookEvent
from ledger.schemas.transaction import TransactionUpdate
from ledger.schemas.webhook import WebhookEventCreate
from ledger.services.transactions import TransactionLifecycle
from ledger.store.base import RecordStore
from ledger.utils.errors import (
    ConcurrentUpdateError,
    ConstraintViolationError,
    InvalidTransitionError,
    TransactionNotFoundError,
    WebhookEventNotFoundError,
)
from ledger.utils.time import utcnow

logger = logging.getLogger(__name__)

# Business outcomes of the inner update that must not block acknowledging the event.
_UNAPPLIED_ERRORS = (TransactionNotFoundError, InvalidTransitionError, ConcurrentUpdateError)


@dataclass(frozen=True)
class WebhookProcessResult:
    """Outcome of one delivery.

    ``processed`` is true the first time an event id is seen; it says nothing
    about whether the status change took effect, which ``applied`` reports.
    """

    processed: bool
    applied: bool
    message: str
    event: WebhookEvent


class WebhookProcessor:
    """Deduplicates events by id and drives the lifecycle update path."""

    def __init__(self, store: RecordStore, lifecycle: TransactionLifecycle):
        self.store = store
        self.lifecycle = lifecycle

    def process(self, event: WebhookEventCreate, payload: dict[str, Any] | None = None) -> WebhookProcessResult:
        existing = self.store.find_webhook_event_by_id(event.event_id)
        if existing is not None:
            logger.info(
                "Webhook replay ignored",
                extra={"event_id": event.event_id, "transaction_id": existing.transaction_id},
            )
            return WebhookProcessResult(
                processed=False, applied=False, message="Event already processed", event=existing
            )

        applied = True
        try:
            self.lifecycle.update(event.transaction_id, TransactionUpdate(status=event.status))
        except _UNAPPLIED_ERRORS as exc:
            applied = False
            logger.warning(
                "Failed to update transaction from webhook",
                extra={
                    "event_id": event.event_id,
                    "transaction_id": event.transaction_id,
                    "requested_status": event.status.value,
                    "error_code": exc.code,
                    "error": exc.message,
                },
            )

        fields = {
            "event_id": event.event_id,
            "transaction_id": event.transaction_id,
            "event_type": event.event_type,
            "payload_json": payload if payload is not None else event.model_dump(mode="json"),
            "processed_at": utcnow(),
        }
        try:
            record = self.store.insert_webhook_event(fields)
        except ConstraintViolationError:
            prior = self.store.find_webhook_event_by_id(event.event_id)
            if prior is None:
                raise
            logger.warning(
                "Webhook event recorded by a concurrent delivery",
                extra={"event_id": event.event_id, "applied": applied},
            )
            return WebhookProcessResult(
                processed=False, applied=applied, message="Event already processed", event=prior
            )

        logger.info(
            "Webhook processed",
            extra={
                "event_id": record.event_id,
                "transaction_id": record.transaction_id,
                "event_type": record.event_type,
                "applied": applied,
            },
        )
        message = (
            "Webhook processed successfully"
            if applied
            else "Webhook recorded; transaction update was not applied"
        )
        return WebhookProcessResult(processed=True, applied=applied, message=message, event=record)

    def get_event(self, event_id: str) -> WebhookEvent:
        event = self.store.find_webhook_event_by_id(event_id)
        if event is None:
            raise WebhookEventNotFoundError(event_id)
        return event

    def list_transaction_events(self, transaction_id: int) -> Sequence[WebhookEvent]:
        return self.store.list_webhook_events_for_transaction(transaction_id)


__all__ = ["WebhookProcessResult", "WebhookProcessor"]
