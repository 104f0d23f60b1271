"""GET /v1/customers/{customer_id}/statement - downloadable PDF statement"""

import time
from fastapi import APIRouter, Depends, HTTPException, Request
from starlette.concurrency import run_in_threadpool
from starlette.responses import Response

from store_ledger.api.dependencies import get_ledger_state, get_request_id
from store_ledger.application.state import LedgerState
from store_ledger.domain.exceptions import CustomerNotFoundError, StatementRenderError
from store_ledger.infrastructure.observability.logging import log_statement_export

router = APIRouter()


@router.get(
    "/customers/{customer_id}/statement",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}}},
)
async def download_statement(
    customer_id: int,
    request: Request,
    ledger: LedgerState = Depends(get_ledger_state),
):
    """
    Render the customer's account statement and send it as an attachment.

    Rasterization is CPU-bound and runs in a worker thread with its own
    rendering surface.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        export = await run_in_threadpool(ledger.export_statement, customer_id)
    except CustomerNotFoundError:
        raise HTTPException(status_code=404, detail="Customer not found")
    except StatementRenderError as e:
        raise HTTPException(status_code=500, detail=e.user_message)

    duration_ms = (time.time() - start_time) * 1000
    log_statement_export(request_id, customer_id, export.transaction_count, export.page_count, duration_ms)

    return Response(
        content=export.pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )
