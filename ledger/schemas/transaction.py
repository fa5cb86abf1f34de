"""Transaction schemas."""
from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from ledger.models.transaction import Currency, TransactionStatus, TransactionType


def _upper(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().upper()
    return value


class TransactionCreate(BaseModel):
    external_id: str = Field(
        min_length=3,
        max_length=255,
        validation_alias=AliasChoices("external_id", "externalId"),
    )
    amount: int = Field(ge=1, description="Amount in minor currency units (e.g. cents).")
    currency: Currency
    type: TransactionType
    metadata: dict[str, Any] | None = None

    @field_validator("external_id", mode="before")
    @classmethod
    def _strip_external_id(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("currency", "type", mode="before")
    @classmethod
    def _normalize_enum(cls, value: Any) -> Any:
        """Allow case-insensitive enum values from clients."""

        return _upper(value)


class TransactionUpdate(BaseModel):
    status: TransactionStatus | None = None
    metadata: dict[str, Any] | None = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> Any:
        return _upper(value)


class TransactionRead(BaseModel):
    id: int
    external_id: str
    amount: int
    currency: Currency
    type: TransactionType
    status: TransactionStatus
    metadata: dict[str, Any] = Field(validation_alias=AliasChoices("metadata_json", "metadata"))
    is_active: bool
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None
    version: int

    model_config = ConfigDict(from_attributes=True)


class PaginationRead(BaseModel):
    limit: int
    offset: int
    total: int
    has_more: bool

    model_config = ConfigDict(from_attributes=True)


class TransactionListRead(BaseModel):
    data: list[TransactionRead]
    pagination: PaginationRead

    model_config = ConfigDict(from_attributes=True)


class TransactionStatisticsRead(BaseModel):
    total: int
    by_status: dict[TransactionStatus, int]
