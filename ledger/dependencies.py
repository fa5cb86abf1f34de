"""FastAPI dependencies wiring the record store into the services."""
from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from ledger.db import get_db
from ledger.services.transactions import TransactionLifecycle, TransactionService
from ledger.services.webhooks import WebhookProcessor
from ledger.store import RecordStore, SqlRecordStore


def get_record_store(db: Session = Depends(get_db)) -> RecordStore:
    return SqlRecordStore(db)


def get_transaction_service(store: RecordStore = Depends(get_record_store)) -> TransactionLifecycle:
    return TransactionService(store)


def get_webhook_processor(
    store: RecordStore = Depends(get_record_store),
    lifecycle: TransactionLifecycle = Depends(get_transaction_service),
) -> WebhookProcessor:
    return WebhookProcessor(store, lifecycle)


__all__ = ["get_record_store", "get_transaction_service", "get_webhook_processor"]
