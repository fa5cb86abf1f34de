"""Schema package exports."""
from .transaction import (
    PaginationRead,
    TransactionCreate,
    TransactionListRead,
    TransactionRead,
    TransactionStatisticsRead,
    TransactionUpdate,
)
from .webhook import WebhookEventCreate, WebhookEventRead, WebhookProcessRead

__all__ = [
    "PaginationRead",
    "TransactionCreate",
    "TransactionListRead",
    "TransactionRead",
    "TransactionStatisticsRead",
    "TransactionUpdate",
    "WebhookEventCreate",
    "WebhookEventRead",
    "WebhookProcessRead",
]
