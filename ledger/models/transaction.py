"""Transaction model."""
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    Enum as SqlEnum,
    Index,
    Integer,
    String,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

# Upper bound of the INTEGER primary key; larger ids cannot exist.
MAX_ID = 2**31 - 1


class TransactionStatus(str, PyEnum):
    """Possible transaction statuses."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETE = "COMPLETE"
    FAILED = "FAILED"


class TransactionType(str, PyEnum):
    PAYMENT = "PAYMENT"
    REFUND = "REFUND"
    ADJUSTMENT = "ADJUSTMENT"


class Currency(str, PyEnum):
    """Supported ISO 4217 currencies."""

    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    JPY = "JPY"
    CAD = "CAD"
    AUD = "AUD"
    CHF = "CHF"


class Transaction(Base):
    """A ledger transaction tracked through its status lifecycle."""

    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transactions_positive_amount"),
        # external_id is only unique among active rows; soft-deleted keys may be reused.
        Index(
            "uq_transactions_active_external_id",
            "external_id",
            unique=True,
            sqlite_where=text("is_active"),
            postgresql_where=text("is_active"),
        ),
        Index("ix_transactions_active_created", "is_active", "created_at"),
        Index("ix_transactions_status", "status"),
        Index("ix_transactions_currency", "currency"),
    )

    external_id: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[Currency] = mapped_column(SqlEnum(Currency), nullable=False)
    type: Mapped[TransactionType] = mapped_column(SqlEnum(TransactionType), nullable=False)
    status: Mapped[TransactionStatus] = mapped_column(
        SqlEnum(TransactionStatus), nullable=False, default=TransactionStatus.PENDING
    )
    metadata_json: Mapped[dict] = mapped_column("metadata", JSON, nullable=False, default=dict)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # Bumped by every conditional write; guards read-modify-write merges.
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default=text("1"))
