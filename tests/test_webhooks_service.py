"""Webhook idempotency processor against the in-memory store."""
import pytest

from ledger.models import Currency, TransactionStatus, TransactionType
from ledger.models.webhook_event import DEFAULT_EVENT_TYPE
from ledger.schemas import TransactionCreate, WebhookEventCreate
from ledger.services.webhooks import WebhookProcessor
from ledger.store import InMemoryRecordStore
from ledger.utils.errors import StoreUnavailableError, WebhookEventNotFoundError


@pytest.fixture
def transaction(service):
    return service.create(
        TransactionCreate(
            external_id="wh-ext-1", amount=2500, currency=Currency.EUR, type=TransactionType.PAYMENT
        )
    )


def _event(event_id, transaction_id, status, **extra):
    return WebhookEventCreate(event_id=event_id, transaction_id=transaction_id, status=status, **extra)


def test_first_delivery_applies_status(processor, service, transaction, memory_store):
    result = processor.process(_event("evt-1", transaction.id, TransactionStatus.PROCESSING))

    assert result.processed is True
    assert result.applied is True
    assert result.message == "Webhook processed successfully"
    assert result.event.event_id == "evt-1"
    assert result.event.event_type == DEFAULT_EVENT_TYPE
    assert service.get_by_id(transaction.id).status == TransactionStatus.PROCESSING
    assert len(memory_store.all_webhook_events()) == 1


def test_replay_is_ignored_even_with_different_status(processor, service, transaction, memory_store):
    processor.process(_event("evt-2", transaction.id, TransactionStatus.PROCESSING))

    replay = processor.process(_event("evt-2", transaction.id, TransactionStatus.FAILED))

    assert replay.processed is False
    assert replay.applied is False
    assert replay.message == "Event already processed"
    assert replay.event.payload_json["status"] == "PROCESSING"
    assert service.get_by_id(transaction.id).status == TransactionStatus.PROCESSING
    assert len(memory_store.all_webhook_events()) == 1


def test_invalid_transition_is_recorded_but_not_applied(processor, service, transaction, memory_store):
    result = processor.process(_event("evt-3", transaction.id, TransactionStatus.COMPLETE))

    assert result.processed is True
    assert result.applied is False
    assert service.get_by_id(transaction.id).status == TransactionStatus.PENDING
    assert [e.event_id for e in memory_store.all_webhook_events()] == ["evt-3"]


def test_invalid_transition_logs_warning(processor, transaction, caplog):
    with caplog.at_level("WARNING", logger="ledger.services.webhooks"):
        processor.process(_event("evt-warn", transaction.id, TransactionStatus.COMPLETE))

    assert "Failed to update transaction from webhook" in caplog.text


def test_unknown_transaction_is_still_recorded(processor, memory_store):
    result = processor.process(_event("evt-4", 4242, TransactionStatus.PROCESSING))

    assert result.processed is True
    assert result.applied is False
    stored = memory_store.all_webhook_events()
    assert len(stored) == 1
    assert stored[0].transaction_id == 4242


def test_soft_deleted_transaction_is_not_updated(processor, service, transaction, memory_store):
    service.delete(transaction.id)

    result = processor.process(_event("evt-5", transaction.id, TransactionStatus.PROCESSING))

    assert result.applied is False
    assert memory_store.all_transactions()[0].status == TransactionStatus.PENDING


def test_raw_payload_is_stored_verbatim(processor, transaction):
    body = {
        "eventId": "evt-6",
        "transactionId": transaction.id,
        "status": "processing",
        "provider": {"name": "acme", "attempt": 2},
    }

    result = processor.process(WebhookEventCreate.model_validate(body), payload=body)

    assert result.event.payload_json == body


def test_payload_defaults_to_parsed_event(processor, transaction):
    result = processor.process(
        _event("evt-7", transaction.id, TransactionStatus.FAILED, event_type="transaction.failed")
    )

    assert result.event.event_type == "transaction.failed"
    assert result.event.payload_json == {
        "event_id": "evt-7",
        "transaction_id": transaction.id,
        "status": "FAILED",
        "event_type": "transaction.failed",
    }


def test_sequential_events_walk_the_lifecycle(processor, service, transaction):
    processor.process(_event("evt-8a", transaction.id, TransactionStatus.PROCESSING))
    processor.process(_event("evt-8b", transaction.id, TransactionStatus.COMPLETE))

    assert service.get_by_id(transaction.id).status == TransactionStatus.COMPLETE


class _LateCollisionStore(InMemoryRecordStore):
    """Reports the event as unseen once, as if a concurrent delivery was in flight."""

    def __init__(self):
        super().__init__()
        self.hide_next_lookup = False

    def find_webhook_event_by_id(self, event_id):
        if self.hide_next_lookup:
            self.hide_next_lookup = False
            return None
        return super().find_webhook_event_by_id(event_id)


def test_concurrent_delivery_collision_reports_already_processed(service):
    store = _LateCollisionStore()
    lifecycle = type(service)(store)
    processor = WebhookProcessor(store, lifecycle)
    transaction = lifecycle.create(
        TransactionCreate(external_id="wh-race", amount=100, currency=Currency.USD, type=TransactionType.PAYMENT)
    )
    first = processor.process(_event("evt-9", transaction.id, TransactionStatus.PROCESSING))
    store.hide_next_lookup = True

    second = processor.process(_event("evt-9", transaction.id, TransactionStatus.COMPLETE))

    assert second.processed is False
    assert second.event.id == first.event.id
    assert len(store.all_webhook_events()) == 1


def test_store_outage_propagates(processor, transaction, memory_store, monkeypatch):
    def _down(_event_id):
        raise StoreUnavailableError("Record store unavailable")

    monkeypatch.setattr(memory_store, "find_webhook_event_by_id", _down)

    with pytest.raises(StoreUnavailableError):
        processor.process(_event("evt-10", transaction.id, TransactionStatus.PROCESSING))


def test_get_event(processor, transaction):
    processor.process(_event("evt-11", transaction.id, TransactionStatus.PROCESSING))

    assert processor.get_event("evt-11").transaction_id == transaction.id
    with pytest.raises(WebhookEventNotFoundError):
        processor.get_event("missing")


def test_list_transaction_events_newest_first(processor, transaction):
    processor.process(_event("evt-12a", transaction.id, TransactionStatus.PROCESSING))
    processor.process(_event("evt-12b", transaction.id, TransactionStatus.COMPLETE))
    processor.process(_event("evt-other", 777, TransactionStatus.PROCESSING))

    events = processor.list_transaction_events(transaction.id)

    assert [e.event_id for e in events] == ["evt-12b", "evt-12a"]
