"""Ledger aggregation - rolls the transaction log up into customer totals"""

from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List, Optional, Sequence

from store_ledger.domain.exceptions import InvalidTransactionAmountError
from store_ledger.domain.models import (
    ZERO,
    Customer,
    DashboardStats,
    LedgerTotals,
    Transaction,
    TransactionType,
)


def check_amount(value: Any, label: str = "Transaction") -> Decimal:
    """
    Return value as a Decimal, rejecting anything unusable as a ledger amount.

    Raises:
        InvalidTransactionAmountError: value is non-numeric, NaN/infinite, or <= 0
    """
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError) as e:
        raise InvalidTransactionAmountError(f"{label} has non-numeric amount {value!r}") from e

    if not amount.is_finite() or amount <= ZERO:
        raise InvalidTransactionAmountError(f"{label} has invalid amount {value!r}")
    return amount


def validated_amount(transaction: Transaction) -> Decimal:
    return check_amount(transaction.amount, f"Transaction {transaction.id}")


def aggregate(customer_id: int, transactions: Iterable[Transaction]) -> LedgerTotals:
    """
    Compute a customer's totals from the full (unfiltered) transaction log.

    - CREDIT amounts sum into total_credit
    - DEBIT amounts sum into total_debit
    - balance = total_credit - total_debit

    No matching transactions yields all-zero totals.
    """
    total_credit = ZERO
    total_debit = ZERO

    for txn in transactions:
        if txn.customer_id != customer_id:
            continue
        amount = validated_amount(txn)
        if txn.type == TransactionType.CREDIT:
            total_credit += amount
        else:
            total_debit += amount

    return LedgerTotals(
        total_credit=total_credit,
        total_debit=total_debit,
        balance=total_credit - total_debit,
    )


def apply_transaction(totals: LedgerTotals, transaction: Transaction) -> LedgerTotals:
    """Incremental form of aggregate() for a single new transaction"""
    amount = validated_amount(transaction)

    if transaction.type == TransactionType.CREDIT:
        return LedgerTotals(
            total_credit=totals.total_credit + amount,
            total_debit=totals.total_debit,
            balance=totals.balance + amount,
        )
    return LedgerTotals(
        total_credit=totals.total_credit,
        total_debit=totals.total_debit + amount,
        balance=totals.balance - amount,
    )


def record_transaction(customer: Customer, transaction: Transaction) -> Customer:
    """Return the customer with aggregates refreshed to include a new transaction"""
    if transaction.customer_id != customer.id:
        raise ValueError(
            f"Transaction {transaction.id} belongs to customer {transaction.customer_id}, not {customer.id}"
        )
    return customer.with_totals(apply_transaction(customer.totals, transaction))


def rank_outstanding(customers: Iterable[Customer]) -> List[Customer]:
    """Customers with a non-zero balance, largest absolute balance first"""
    outstanding = [c for c in customers if c.balance != ZERO]
    return sorted(outstanding, key=lambda c: abs(c.balance), reverse=True)


def customer_transactions(customer_id: int, transactions: Iterable[Transaction]) -> List[Transaction]:
    """One customer's transactions, newest transaction_date first (stable on ties)"""
    selected = [t for t in transactions if t.customer_id == customer_id]
    return sorted(selected, key=lambda t: t.transaction_date, reverse=True)


def most_recent_transaction(customer_id: int, transactions: Iterable[Transaction]) -> Optional[Transaction]:
    ordered = customer_transactions(customer_id, transactions)
    return ordered[0] if ordered else None


def dashboard_stats(customers: Sequence[Customer]) -> DashboardStats:
    """Store-wide totals shown on the dashboard"""
    total_credit = sum((c.total_credit for c in customers), ZERO)
    total_debit = sum((c.total_debit for c in customers), ZERO)

    return DashboardStats(
        total_credit=total_credit,
        total_debit=total_debit,
        net_balance=total_credit - total_debit,
        total_customers=len(customers),
        customers_with_positive_balance=sum(1 for c in customers if c.balance > ZERO),
        customers_with_negative_balance=sum(1 for c in customers if c.balance < ZERO),
    )


def search_customers(customers: Iterable[Customer], term: str = "") -> List[Customer]:
    """Match on name (case-insensitive) or mobile substring"""
    needle = term.strip().lower()
    return [c for c in customers if needle in c.name.lower() or needle in c.mobile]


def filter_transactions(
    transactions: Iterable[Transaction],
    term: str = "",
    type: Optional[TransactionType] = None,
) -> List[Transaction]:
    """Search by the customer snapshot on each transaction, optionally by type"""
    needle = term.strip().lower()
    return [
        t
        for t in transactions
        if (needle in t.customer_name.lower() or needle in t.customer_mobile)
        and (type is None or t.type == type)
    ]
