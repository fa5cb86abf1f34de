"""API routers for the ledger service."""
from fastapi import APIRouter

from . import health, transactions, webhooks


def get_api_router() -> APIRouter:
    """Return the root API router."""

    api_router = APIRouter()
    api_router.include_router(health.router)
    api_router.include_router(transactions.router)
    api_router.include_router(webhooks.router)
    return api_router
