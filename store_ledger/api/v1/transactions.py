"""Transaction endpoints - filtered log and append"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from store_ledger.api.v1.schemas import (
    CustomerSchema,
    TransactionCreateRequest,
    TransactionCreateResponse,
    TransactionSchema,
)
from store_ledger.api.dependencies import get_ledger_state, get_request_id
from store_ledger.application.state import LedgerState
from store_ledger.domain.exceptions import (
    CustomerNotFoundError,
    InvalidTransactionAmountError,
    StoreAPIError,
)
from store_ledger.domain.models import TransactionType
from store_ledger.infrastructure.observability.logging import log_transaction_recorded

router = APIRouter()


@router.get("/transactions", response_model=list[TransactionSchema])
def list_transactions(
    term: str = Query("", description="Customer name or mobile substring"),
    type: Optional[TransactionType] = Query(None, description="CREDIT or DEBIT"),
    ledger: LedgerState = Depends(get_ledger_state),
):
    """Transaction log, optionally filtered by customer search term and type"""
    return [TransactionSchema.from_domain(t) for t in ledger.filter_transactions(term, type)]


@router.post("/transactions", response_model=TransactionCreateResponse)
async def create_transaction(
    request_body: TransactionCreateRequest,
    request: Request,
    ledger: LedgerState = Depends(get_ledger_state),
):
    """
    Append a transaction and return the customer's refreshed aggregates.

    Flow:
    1. Create the transaction on the store backend
    2. Apply it to the customer's aggregates locally
    3. Re-fetch customers and transactions to reconcile
    4. Return the new entry with the up-to-date customer
    """
    request_id = get_request_id(request)

    try:
        transaction, customer = await ledger.record_transaction(
            customer_id=request_body.customer_id,
            type=request_body.type,
            amount=request_body.amount,
            description=request_body.description,
            transaction_date=request_body.transaction_date,
        )

    except CustomerNotFoundError:
        raise HTTPException(status_code=404, detail="Customer not found")

    except InvalidTransactionAmountError as e:
        logging.warning(f"Rejected transaction: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except StoreAPIError as e:
        logging.error(f"Store API error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Store service unavailable")

    log_transaction_recorded(request_id, customer.id, transaction.id, transaction.type.value, customer.balance)

    return TransactionCreateResponse(
        transaction=TransactionSchema.from_domain(transaction),
        customer=CustomerSchema.from_domain(customer),
    )
