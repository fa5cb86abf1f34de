"""Seed sample transactions and webhook events for local development."""
from __future__ import annotations

from ledger import db
from ledger.config import get_settings
from ledger.core.logging import setup_logging
from ledger.models import Currency, TransactionStatus, TransactionType
from ledger.schemas import TransactionCreate, TransactionUpdate, WebhookEventCreate
from ledger.services.transactions import TransactionService
from ledger.services.webhooks import WebhookProcessor
from ledger.store import SqlRecordStore
from ledger.utils.errors import DuplicateExternalIdError

SAMPLES = [
    ("seed_payment_001", 10000, Currency.USD, TransactionType.PAYMENT),
    ("seed_payment_002", 2599, Currency.EUR, TransactionType.PAYMENT),
    ("seed_refund_001", 1500, Currency.USD, TransactionType.REFUND),
    ("seed_adjustment_001", 42, Currency.GBP, TransactionType.ADJUSTMENT),
]


def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level, service="apexfin-ledger-seed", env=settings.app_env)
    print(f"Using database: {settings.database_url}")

    db.create_all()
    with db.session_scope() as session:
        store = SqlRecordStore(session)
        service = TransactionService(store)
        processor = WebhookProcessor(store, service)

        created = []
        for external_id, amount, currency, kind in SAMPLES:
            payload = TransactionCreate(
                external_id=external_id,
                amount=amount,
                currency=currency,
                type=kind,
                metadata={"source": "seed"},
            )
            try:
                created.append(service.create(payload))
            except DuplicateExternalIdError as exc:
                # Re-running the seed reuses what is already there.
                created.append(exc.existing)

        first = created[0]
        if first.status == TransactionStatus.PENDING:
            service.update(first.id, TransactionUpdate(status=TransactionStatus.PROCESSING))
        result = processor.process(
            WebhookEventCreate(
                event_id=f"seed_evt_{first.id}_complete",
                transaction_id=first.id,
                status=TransactionStatus.COMPLETE,
            )
        )
        print(f"Seed data inserted: {len(created)} transactions, webhook processed={result.processed}.")


if __name__ == "__main__":
    main()
