"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

ZERO = Decimal("0")


class TransactionType(str, Enum):
    """Direction of a ledger entry"""

    CREDIT = "CREDIT"  # customer owes the store more
    DEBIT = "DEBIT"  # payment received


@dataclass(frozen=True)
class LedgerTotals:
    """Aggregates derived from a customer's transaction log"""

    total_credit: Decimal = ZERO
    total_debit: Decimal = ZERO
    balance: Decimal = ZERO


@dataclass(frozen=True)
class Customer:
    """Store customer with aggregates materialized from the transaction log"""

    id: int
    name: str
    mobile: str
    total_credit: Decimal = ZERO
    total_debit: Decimal = ZERO
    balance: Decimal = ZERO
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def totals(self) -> LedgerTotals:
        return LedgerTotals(self.total_credit, self.total_debit, self.balance)

    def with_totals(self, totals: LedgerTotals) -> "Customer":
        """Return a copy carrying freshly computed aggregates"""
        return replace(
            self,
            total_credit=totals.total_credit,
            total_debit=totals.total_debit,
            balance=totals.balance,
        )


@dataclass(frozen=True)
class Transaction:
    """Append-only ledger entry for a single customer"""

    id: int
    customer_id: int
    type: TransactionType
    amount: Decimal
    transaction_date: date
    description: Optional[str] = None
    # Display snapshot taken at creation time, never used for aggregation
    customer_name: str = ""
    customer_mobile: str = ""
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class DashboardStats:
    """Store-wide totals across all customers"""

    total_credit: Decimal
    total_debit: Decimal
    net_balance: Decimal
    total_customers: int
    customers_with_positive_balance: int
    customers_with_negative_balance: int
