"""Customer endpoints - search, creation, collections list, per-customer history"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from store_ledger.api.v1.schemas import (
    CustomerCreateRequest,
    CustomerSchema,
    OutstandingItem,
    OutstandingResponse,
    TransactionSchema,
)
from store_ledger.api.dependencies import get_ledger_state, get_request_id
from store_ledger.application.state import LedgerState
from store_ledger.domain.exceptions import CustomerNotFoundError, StoreAPIError

router = APIRouter()


@router.get("/customers", response_model=list[CustomerSchema])
def list_customers(
    term: str = Query("", description="Name or mobile substring"),
    ledger: LedgerState = Depends(get_ledger_state),
):
    """Customers with their current aggregates, optionally filtered by search term"""
    return [CustomerSchema.from_domain(c) for c in ledger.search_customers(term)]


@router.post("/customers", response_model=CustomerSchema)
async def create_customer(
    request_body: CustomerCreateRequest,
    request: Request,
    ledger: LedgerState = Depends(get_ledger_state),
):
    """Create a customer with zero balance"""
    request_id = get_request_id(request)
    try:
        customer = await ledger.create_customer(request_body.name, request_body.mobile)
    except StoreAPIError as e:
        logging.error(f"Store API error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Store service unavailable")

    return CustomerSchema.from_domain(customer)


@router.get("/customers/outstanding", response_model=OutstandingResponse)
def get_outstanding(ledger: LedgerState = Depends(get_ledger_state)):
    """
    Customers with a non-zero balance, largest amount first.

    Returns:
        Each customer with the date of their most recent transaction
    """
    return OutstandingResponse(
        customers=[
            OutstandingItem(
                customer=CustomerSchema.from_domain(customer),
                last_transaction_date=latest.transaction_date if latest else None,
            )
            for customer, latest in ledger.outstanding()
        ]
    )


@router.get("/customers/{customer_id}/transactions", response_model=list[TransactionSchema])
def get_customer_transactions(customer_id: int, ledger: LedgerState = Depends(get_ledger_state)):
    """One customer's transactions, newest first"""
    try:
        transactions = ledger.customer_transactions(customer_id)
    except CustomerNotFoundError:
        raise HTTPException(status_code=404, detail="Customer not found")

    return [TransactionSchema.from_domain(t) for t in transactions]
