"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from store_ledger.application.state import LedgerState


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_ledger_state(request: Request) -> LedgerState:
    """Provide the application-owned ledger state"""
    return request.app.state.ledger
