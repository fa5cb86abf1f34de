"""ORM models package."""
from .base import Base
from .transaction import MAX_ID, Currency, Transaction, TransactionStatus, TransactionType
from .webhook_event import DEFAULT_EVENT_TYPE, WebhookEvent

__all__ = [
    "Base",
    "MAX_ID",
    "Currency",
    "DEFAULT_EVENT_TYPE",
    "Transaction",
    "TransactionStatus",
    "TransactionType",
    "WebhookEvent",
]
