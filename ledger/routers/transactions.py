"""Transaction lifecycle endpoints."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from ledger.dependencies import get_transaction_service, get_webhook_processor
from ledger.models.transaction import MAX_ID, Currency, TransactionStatus
from ledger.schemas.transaction import (
    PaginationRead,
    TransactionCreate,
    TransactionListRead,
    TransactionRead,
    TransactionStatisticsRead,
    TransactionUpdate,
)
from ledger.schemas.webhook import WebhookEventRead
from ledger.services.transactions import TransactionLifecycle
from ledger.services.webhooks import WebhookProcessor
from ledger.utils.errors import DuplicateExternalIdError, error_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/transactions", tags=["transactions"])


@router.post("", response_model=TransactionRead, status_code=status.HTTP_201_CREATED)
def create_transaction(
    payload: TransactionCreate,
    service: TransactionLifecycle = Depends(get_transaction_service),
) -> TransactionRead:
    """Create a transaction; an active duplicate external_id returns 409 with the existing record."""

    try:
        transaction = service.create(payload)
    except DuplicateExternalIdError as exc:
        existing = TransactionRead.model_validate(exc.existing).model_dump(mode="json")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=error_response(exc.code, exc.message, {"existing_transaction": existing}),
        )
    return TransactionRead.model_validate(transaction)


@router.get("", response_model=TransactionListRead)
def list_transactions(
    status_filter: TransactionStatus | None = Query(default=None, alias="status"),
    currency: Currency | None = Query(default=None),
    limit: int | None = Query(default=None),
    offset: int | None = Query(default=None, ge=0),
    service: TransactionLifecycle = Depends(get_transaction_service),
) -> TransactionListRead:
    page = service.list(status=status_filter, currency=currency, limit=limit, offset=offset)
    return TransactionListRead(
        data=[TransactionRead.model_validate(t) for t in page.transactions],
        pagination=PaginationRead.model_validate(page.pagination),
    )


@router.get("/stats", response_model=TransactionStatisticsRead)
def transaction_statistics(
    service: TransactionLifecycle = Depends(get_transaction_service),
) -> TransactionStatisticsRead:
    return TransactionStatisticsRead.model_validate(service.get_statistics())


@router.get("/{transaction_id}", response_model=TransactionRead)
def get_transaction(
    transaction_id: int = Path(ge=1, le=MAX_ID),
    service: TransactionLifecycle = Depends(get_transaction_service),
) -> TransactionRead:
    return TransactionRead.model_validate(service.get_by_id(transaction_id))


@router.patch("/{transaction_id}", response_model=TransactionRead)
def update_transaction(
    payload: TransactionUpdate,
    transaction_id: int = Path(ge=1, le=MAX_ID),
    service: TransactionLifecycle = Depends(get_transaction_service),
) -> TransactionRead:
    """Change status and/or merge metadata."""

    return TransactionRead.model_validate(service.update(transaction_id, payload))


@router.delete("/{transaction_id}")
def delete_transaction(
    transaction_id: int = Path(ge=1, le=MAX_ID),
    service: TransactionLifecycle = Depends(get_transaction_service),
) -> dict[str, bool]:
    service.delete(transaction_id)
    return {"deleted": True}


@router.get("/{transaction_id}/webhooks", response_model=list[WebhookEventRead])
def list_transaction_webhooks(
    transaction_id: int = Path(ge=1, le=MAX_ID),
    processor: WebhookProcessor = Depends(get_webhook_processor),
) -> list[WebhookEventRead]:
    """Return the webhook events received for a transaction, newest first."""

    return [
        WebhookEventRead.model_validate(event)
        for event in processor.list_transaction_events(transaction_id)
    ]


__all__ = ["router"]
