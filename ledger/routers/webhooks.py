"""Inbound webhook endpoints."""
from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from ledger.dependencies import get_webhook_processor
from ledger.schemas.webhook import WebhookEventCreate, WebhookEventRead, WebhookProcessRead
from ledger.services.webhooks import WebhookProcessor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/webhooks", tags=["webhooks"])


@router.post("/transaction-update", response_model=WebhookProcessRead, status_code=status.HTTP_200_OK)
def transaction_update_webhook(
    body: dict[str, Any] = Body(...),
    processor: WebhookProcessor = Depends(get_webhook_processor),
) -> WebhookProcessRead:
    """Acknowledge a transaction status notification.

    The raw body is stored verbatim on the event record; a rejected status
    change still returns 200 with ``applied`` false.
    """

    try:
        event = WebhookEventCreate.model_validate(body)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors(include_url=False))

    result = processor.process(event, payload=body)
    logger.info(
        "Webhook acknowledged",
        extra={"event_id": event.event_id, "processed": result.processed, "applied": result.applied},
    )
    return WebhookProcessRead(
        processed=result.processed,
        applied=result.applied,
        message=result.message,
        event=WebhookEventRead.model_validate(result.event),
    )


@router.get("/events/{event_id}", response_model=WebhookEventRead)
def get_webhook_event(
    event_id: str,
    processor: WebhookProcessor = Depends(get_webhook_processor),
) -> WebhookEventRead:
    return WebhookEventRead.model_validate(processor.get_event(event_id))


__all__ = ["router"]
