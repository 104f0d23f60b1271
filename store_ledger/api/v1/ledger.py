"""Store-wide endpoints - dashboard totals, explicit refresh, local backup"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from store_ledger.api.v1.schemas import BackupResponse, DashboardResponse, RefreshResponse
from store_ledger.api.dependencies import get_ledger_state, get_request_id
from store_ledger.application.state import LedgerState
from store_ledger.domain.exceptions import InvalidTransactionAmountError, StoreAPIError

router = APIRouter()


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(ledger: LedgerState = Depends(get_ledger_state)):
    """Total credit, total debit, net balance and customer counts"""
    return DashboardResponse.from_domain(ledger.dashboard())


@router.post("/refresh", response_model=RefreshResponse)
async def refresh(request: Request, ledger: LedgerState = Depends(get_ledger_state)):
    """Reload customers and transactions; on failure the previous state is kept"""
    request_id = get_request_id(request)
    try:
        await ledger.refresh()
    except StoreAPIError as e:
        logging.error(f"Store API error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Store service unavailable")
    except InvalidTransactionAmountError as e:
        logging.error(f"Rejected transaction log: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=502, detail=str(e))

    return RefreshResponse(
        customer_count=len(ledger.customers),
        transaction_count=len(ledger.transactions),
        refreshed_at=ledger.last_refreshed_at,
    )


@router.post("/backup", response_model=BackupResponse)
def create_backup(request: Request, ledger: LedgerState = Depends(get_ledger_state)):
    """Write a JSON snapshot of the current ledger to the backup directory"""
    request_id = get_request_id(request)
    try:
        path = ledger.backup()
    except OSError as e:
        logging.error(f"Backup failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail=f"Backup failed: {e}")

    return BackupResponse(status="success", message="Backup completed successfully", path=str(path))
