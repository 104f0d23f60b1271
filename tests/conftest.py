"""Pytest fixtures for testing"""

import pytest
from datetime import date, timedelta
from decimal import Decimal
from itertools import count
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient

from store_ledger.api.main import create_app
from store_ledger.application.state import LedgerState
from store_ledger.domain.models import Customer, Transaction, TransactionType
from store_ledger.infrastructure.clients.store_api import StoreClient

_ids = count(1000)


def make_transaction(
    customer_id: int,
    type: TransactionType,
    amount,
    transaction_date: date | None = None,
    description: str | None = None,
    customer_name: str = "",
    customer_mobile: str = "",
    id: int | None = None,
) -> Transaction:
    """Build a transaction with sensible defaults"""
    return Transaction(
        id=id if id is not None else next(_ids),
        customer_id=customer_id,
        type=type,
        amount=Decimal(str(amount)),
        transaction_date=transaction_date or date(2024, 5, 1),
        description=description,
        customer_name=customer_name,
        customer_mobile=customer_mobile,
    )


@pytest.fixture
def asha() -> Customer:
    """Customer whose backend totals already reflect her transactions"""
    return Customer(
        id=1,
        name="Asha",
        mobile="555-0100",
        total_credit=Decimal("600"),
        total_debit=Decimal("200"),
        balance=Decimal("400"),
    )


@pytest.fixture
def ravi() -> Customer:
    return Customer(
        id=2,
        name="Ravi Kumar",
        mobile="555-0200",
        total_credit=Decimal("0"),
        total_debit=Decimal("50"),
        balance=Decimal("-50"),
    )


@pytest.fixture
def sample_transactions() -> list[Transaction]:
    """Asha: CREDIT 500, DEBIT 200, CREDIT 100; Ravi: DEBIT 50"""
    base_date = date(2024, 5, 1)
    return [
        make_transaction(1, TransactionType.CREDIT, 500, base_date, "Groceries", "Asha", "555-0100", id=1),
        make_transaction(1, TransactionType.DEBIT, 200, base_date + timedelta(days=3), "Cash payment", "Asha", "555-0100", id=2),
        make_transaction(1, TransactionType.CREDIT, 100, base_date + timedelta(days=7), None, "Asha", "555-0100", id=3),
        make_transaction(2, TransactionType.DEBIT, 50, base_date + timedelta(days=1), "Advance", "Ravi Kumar", "555-0200", id=4),
    ]


@pytest.fixture
def store_client(asha: Customer, ravi: Customer, sample_transactions: list[Transaction]) -> AsyncMock:
    """Backend client double serving the sample ledger"""
    client = AsyncMock(spec=StoreClient)
    client.list_customers.return_value = [asha, ravi]
    client.list_transactions.return_value = list(sample_transactions)
    return client


@pytest.fixture
async def ledger_state(store_client: AsyncMock) -> LedgerState:
    """Ledger state loaded from the sample backend"""
    state = LedgerState(client=store_client)
    await state.refresh()
    return state


@pytest.fixture
def client(ledger_state: LedgerState) -> TestClient:
    """Create FastAPI test client around the loaded ledger state"""
    app = create_app(ledger_state=ledger_state, load_on_startup=False)
    return TestClient(app)
