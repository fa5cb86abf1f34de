"""Inbound webhook schemas."""
from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from ledger.models.transaction import MAX_ID, TransactionStatus
from ledger.models.webhook_event import DEFAULT_EVENT_TYPE


class WebhookEventCreate(BaseModel):
    """Transaction status notification sent by the external processor."""

    event_id: str = Field(
        min_length=3,
        max_length=255,
        validation_alias=AliasChoices("event_id", "eventId"),
    )
    transaction_id: int = Field(
        ge=1, le=MAX_ID, validation_alias=AliasChoices("transaction_id", "transactionId")
    )
    status: TransactionStatus
    event_type: str = Field(
        default=DEFAULT_EVENT_TYPE,
        min_length=1,
        max_length=100,
        validation_alias=AliasChoices("event_type", "eventType"),
    )

    @field_validator("event_id", "event_type", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value


class WebhookEventRead(BaseModel):
    id: int
    event_id: str
    transaction_id: int
    event_type: str
    payload: dict[str, Any] = Field(validation_alias=AliasChoices("payload_json", "payload"))
    processed_at: datetime

    model_config = ConfigDict(from_attributes=True)


class WebhookProcessRead(BaseModel):
    processed: bool
    applied: bool
    message: str
    event: WebhookEventRead

    model_config = ConfigDict(from_attributes=True)
