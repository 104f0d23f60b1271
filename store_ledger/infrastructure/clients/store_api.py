"""Store backend HTTP client for customers and the transaction log"""

import httpx
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from store_ledger.domain.models import Customer, Transaction, TransactionType
from store_ledger.domain.exceptions import StoreAPIError
from store_ledger.config import settings
from store_ledger.infrastructure.observability.metrics import store_api_failures_counter


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _decimal(value: Any) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def parse_customer(data: Dict[str, Any]) -> Customer:
    return Customer(
        id=data["id"],
        name=data["name"],
        mobile=data["mobile"],
        total_credit=_decimal(data.get("totalCredit") or 0),
        total_debit=_decimal(data.get("totalDebit") or 0),
        balance=_decimal(data.get("balance") or 0),
        created_at=_parse_datetime(data.get("createdAt")),
        updated_at=_parse_datetime(data.get("updatedAt")),
    )


def parse_transaction(data: Dict[str, Any]) -> Transaction:
    return Transaction(
        id=data["id"],
        customer_id=data["customerId"],
        type=TransactionType(data["type"]),
        amount=_decimal(data["amount"]),
        transaction_date=date.fromisoformat(data["transactionDate"]),
        description=data.get("description"),
        customer_name=data.get("customerName") or "",
        customer_mobile=data.get("customerMobile") or "",
        created_at=_parse_datetime(data.get("createdAt")),
    )


class StoreClient:
    """Client for the store backend REST API"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.store_api_base).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def _request(self, operation: str, method: str, path: str, **kwargs) -> Any:
        """
        Perform one call and decode the JSON body (numbers as Decimal).

        Raises:
            StoreAPIError: On timeout, network failure, HTTP errors, or invalid JSON
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.request(method, f"{self.base_url}{path}", **kwargs)
                response.raise_for_status()
                return response.json(parse_float=Decimal)

            except httpx.TimeoutException as e:
                store_api_failures_counter.labels(operation=operation).inc()
                raise StoreAPIError(f"Store API timeout after {self.timeout}s ({operation})") from e
            except httpx.HTTPStatusError as e:
                store_api_failures_counter.labels(operation=operation).inc()
                raise StoreAPIError(f"Store API error: {e.response.status_code} ({operation})") from e
            except httpx.RequestError as e:
                store_api_failures_counter.labels(operation=operation).inc()
                raise StoreAPIError(f"Store API unreachable ({operation}): {e}") from e
            except ValueError as e:
                store_api_failures_counter.labels(operation=operation).inc()
                raise StoreAPIError(f"Invalid JSON from store API ({operation})") from e

    async def list_customers(self) -> List[Customer]:
        """Fetch all customers with their server-side aggregates"""
        data = await self._request("list_customers", "GET", "/customers")
        try:
            return [parse_customer(c) for c in data]
        except (KeyError, ValueError, TypeError, ArithmeticError) as e:
            raise StoreAPIError(f"Invalid customer data from store API: {e}") from e

    async def list_transactions(self) -> List[Transaction]:
        """Fetch the full transaction log"""
        data = await self._request("list_transactions", "GET", "/transactions")
        try:
            return [parse_transaction(t) for t in data]
        except (KeyError, ValueError, TypeError, ArithmeticError) as e:
            raise StoreAPIError(f"Invalid transaction data from store API: {e}") from e

    async def create_customer(self, name: str, mobile: str) -> Customer:
        """Create a customer with zero aggregates"""
        data = await self._request(
            "create_customer",
            "POST",
            "/customers",
            json={"name": name, "mobile": mobile, "totalCredit": 0, "totalDebit": 0, "balance": 0},
        )
        try:
            return parse_customer(data)
        except (KeyError, ValueError, TypeError, ArithmeticError) as e:
            raise StoreAPIError(f"Invalid customer data from store API: {e}") from e

    async def create_transaction(
        self,
        customer_id: int,
        type: TransactionType,
        amount: Decimal,
        description: str = "",
        transaction_date: date | None = None,
    ) -> Transaction:
        """Append a transaction to the log; transaction_date defaults to today"""
        payload = {
            "customerId": customer_id,
            "type": type.value,
            "amount": str(amount),
            "description": description,
            "transactionDate": (transaction_date or date.today()).isoformat(),
        }
        data = await self._request("create_transaction", "POST", "/transactions", json=payload)
        try:
            return parse_transaction(data)
        except (KeyError, ValueError, TypeError, ArithmeticError) as e:
            raise StoreAPIError(f"Invalid transaction data from store API: {e}") from e
