"""Inbound webhook event persistence model."""
from datetime import datetime

from sqlalchemy import JSON, DateTime, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

DEFAULT_EVENT_TYPE = "transaction.updated"


class WebhookEvent(Base):
    """Record of a received webhook, written once at first sight of its event id."""

    __tablename__ = "webhook_events"
    __table_args__ = (
        UniqueConstraint("event_id", name="uq_webhook_events_event_id"),
        Index("ix_webhook_events_transaction_id", "transaction_id"),
        Index("ix_webhook_events_processed_at", "processed_at"),
    )

    event_id: Mapped[str] = mapped_column(String(255), nullable=False)
    # Back-reference only: events for unknown transactions are still recorded.
    transaction_id: Mapped[int] = mapped_column(Integer, nullable=False)
    event_type: Mapped[str] = mapped_column(String(100), nullable=False, default=DEFAULT_EVENT_TYPE)
    payload_json: Mapped[dict] = mapped_column("payload", JSON, nullable=False)
    processed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
