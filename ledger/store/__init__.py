"""Record store contract and implementations."""
from .base import RecordStore, TransactionFilters
from .memory import InMemoryRecordStore
from .sql import SqlRecordStore

__all__ = ["InMemoryRecordStore", "RecordStore", "SqlRecordStore", "TransactionFilters"]
