"""Typed ledger errors and the standardized error payload."""
from __future__ import annotations

from typing import Any


def error_response(code: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    """Return a standardized error payload."""

    payload: dict[str, Any] = {"error": {"code": code, "message": message}}
    if details:
        payload["error"]["details"] = details
    return payload


class LedgerError(Exception):
    """Base class for expected ledger outcomes and store failures."""

    code = "LEDGER_ERROR"
    status_code = 400

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> dict[str, Any]:
        return error_response(self.code, self.message, self.details or None)


class DuplicateExternalIdError(LedgerError):
    """An active transaction already uses the external id.

    ``existing`` holds that transaction so callers can treat the collision as
    an idempotent replay.
    """

    code = "DUPLICATE_EXTERNAL_ID"
    status_code = 409

    def __init__(self, existing: Any):
        self.existing = existing
        super().__init__(
            "Transaction with this external_id already exists",
            {"external_id": existing.external_id, "transaction_id": existing.id},
        )


class TransactionNotFoundError(LedgerError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, transaction_id: int):
        self.transaction_id = transaction_id
        super().__init__("Transaction not found", {"transaction_id": transaction_id})


class WebhookEventNotFoundError(LedgerError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, event_id: str):
        self.event_id = event_id
        super().__init__("Webhook event not found", {"event_id": event_id})


class InvalidTransitionError(LedgerError):
    code = "INVALID_TRANSITION"
    status_code = 422

    def __init__(self, current: Any, target: Any):
        self.current = current
        self.target = target
        current_label = getattr(current, "value", current)
        target_label = getattr(target, "value", target)
        super().__init__(
            f"Invalid status transition from {current_label} to {target_label}",
            {"current_status": current_label, "requested_status": target_label},
        )


class ConcurrentUpdateError(LedgerError):
    """The record changed between validation and the conditional write."""

    code = "CONCURRENT_UPDATE"
    status_code = 409

    def __init__(
        self,
        transaction_id: int,
        expected: Any,
        actual: Any,
        *,
        expected_version: int | None = None,
        actual_version: int | None = None,
    ):
        self.transaction_id = transaction_id
        details: dict[str, Any] = {
            "transaction_id": transaction_id,
            "expected_status": getattr(expected, "value", expected),
            "actual_status": getattr(actual, "value", actual),
        }
        if expected_version is not None:
            details["expected_version"] = expected_version
            details["actual_version"] = actual_version
        super().__init__("Transaction was modified concurrently; retry the request", details)


class ConstraintViolationError(LedgerError):
    code = "CONSTRAINT_VIOLATION"
    status_code = 409


class StoreUnavailableError(LedgerError):
    code = "STORE_UNAVAILABLE"
    status_code = 503


__all__ = [
    "error_response",
    "LedgerError",
    "DuplicateExternalIdError",
    "TransactionNotFoundError",
    "WebhookEventNotFoundError",
    "InvalidTransitionError",
    "ConcurrentUpdateError",
    "ConstraintViolationError",
    "StoreUnavailableError",
]
