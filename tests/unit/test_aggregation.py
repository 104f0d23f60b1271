"""Unit tests for ledger aggregation"""

import pytest
from dataclasses import replace
from datetime import date
from decimal import Decimal
from itertools import permutations

from conftest import make_transaction
from store_ledger.domain.aggregation import (
    aggregate,
    apply_transaction,
    check_amount,
    customer_transactions,
    dashboard_stats,
    filter_transactions,
    most_recent_transaction,
    rank_outstanding,
    record_transaction,
    search_customers,
)
from store_ledger.domain.exceptions import InvalidTransactionAmountError
from store_ledger.domain.models import Customer, LedgerTotals, TransactionType

CREDIT = TransactionType.CREDIT
DEBIT = TransactionType.DEBIT


def customer_with_balance(id: int, balance) -> Customer:
    balance = Decimal(str(balance))
    credit = balance if balance > 0 else Decimal("0")
    debit = -balance if balance < 0 else Decimal("0")
    return Customer(id=id, name=f"Customer {id}", mobile=f"555-{id:04d}",
                    total_credit=credit, total_debit=debit, balance=balance)


def test_aggregate_asha_scenario(sample_transactions):
    """CREDIT 500, DEBIT 200, CREDIT 100 -> 600 / 200 / 400"""
    totals = aggregate(1, sample_transactions)

    assert totals.total_credit == Decimal("600")
    assert totals.total_debit == Decimal("200")
    assert totals.balance == Decimal("400")


def test_aggregate_ignores_other_customers(sample_transactions):
    totals = aggregate(2, sample_transactions)

    assert totals == LedgerTotals(Decimal("0"), Decimal("50"), Decimal("-50"))


def test_aggregate_no_transactions_is_all_zero(sample_transactions):
    """Absence of transactions is a valid state, not an error"""
    assert aggregate(99, sample_transactions) == LedgerTotals()
    assert aggregate(1, []) == LedgerTotals(Decimal("0"), Decimal("0"), Decimal("0"))


@pytest.mark.parametrize(
    "entries",
    [
        [],
        [(CREDIT, "10")],
        [(DEBIT, "10")],
        [(CREDIT, "0.01"), (DEBIT, "1234.56"), (CREDIT, "99.99")],
        [(DEBIT, "5"), (DEBIT, "7.5"), (DEBIT, "0.25")],
    ],
)
def test_aggregate_balance_invariant(entries):
    """balance == total_credit - total_debit for any composition"""
    transactions = [make_transaction(7, t, amount) for t, amount in entries]
    totals = aggregate(7, transactions)

    assert totals.balance == totals.total_credit - totals.total_debit
    assert totals.total_credit >= 0
    assert totals.total_debit >= 0


def test_aggregate_is_order_independent(sample_transactions):
    expected = aggregate(1, sample_transactions)
    for ordering in permutations(sample_transactions):
        assert aggregate(1, ordering) == expected


def test_aggregate_keeps_stored_precision():
    transactions = [
        make_transaction(3, CREDIT, "1234.50"),
        make_transaction(3, DEBIT, "0.25"),
    ]
    totals = aggregate(3, transactions)

    assert totals.total_credit == Decimal("1234.50")
    assert totals.balance == Decimal("1234.25")


@pytest.mark.parametrize("amount", ["0", "-10", "NaN", "Infinity", "abc", None])
def test_aggregate_rejects_invalid_amounts(amount):
    """Bad amounts are rejected, never summed into NaN or corrupt totals"""
    bad = make_transaction(4, CREDIT, "1")
    bad = replace(bad, amount=amount)

    with pytest.raises(InvalidTransactionAmountError):
        aggregate(4, [bad])


def test_aggregate_skips_invalid_amounts_of_other_customers():
    bad = make_transaction(4, CREDIT, "1")
    bad = replace(bad, amount="-1")

    assert aggregate(5, [bad]) == LedgerTotals()


def test_check_amount_returns_decimal():
    assert check_amount(12) == Decimal("12")
    assert check_amount("0.10") == Decimal("0.10")


def test_apply_credit_increases_credit_and_balance():
    totals = LedgerTotals(Decimal("100"), Decimal("40"), Decimal("60"))
    updated = apply_transaction(totals, make_transaction(1, CREDIT, "25"))

    assert updated.total_credit == Decimal("125")
    assert updated.total_debit == Decimal("40")
    assert updated.balance == Decimal("85")


def test_apply_debit_increases_debit_and_decreases_balance():
    totals = LedgerTotals(Decimal("100"), Decimal("40"), Decimal("60"))
    updated = apply_transaction(totals, make_transaction(1, DEBIT, "25"))

    assert updated.total_credit == Decimal("100")
    assert updated.total_debit == Decimal("65")
    assert updated.balance == Decimal("35")


def test_incremental_matches_full_recompute(sample_transactions):
    totals = LedgerTotals()
    for txn in sample_transactions:
        if txn.customer_id == 1:
            totals = apply_transaction(totals, txn)

    assert totals == aggregate(1, sample_transactions)


def test_record_transaction_refreshes_customer(asha):
    updated = record_transaction(asha, make_transaction(1, DEBIT, "150"))

    assert updated.total_debit == Decimal("350")
    assert updated.balance == Decimal("250")
    assert updated.id == asha.id and updated.name == asha.name
    # input customer is untouched
    assert asha.balance == Decimal("400")


def test_record_transaction_rejects_other_customers_transaction(asha):
    with pytest.raises(ValueError):
        record_transaction(asha, make_transaction(2, CREDIT, "10"))


def test_rank_outstanding_orders_by_magnitude():
    """-450 outranks +300"""
    plus = customer_with_balance(1, 300)
    minus = customer_with_balance(2, -450)

    ranked = rank_outstanding([plus, minus])

    assert [c.id for c in ranked] == [2, 1]


def test_rank_outstanding_excludes_settled_customers():
    customers = [
        customer_with_balance(1, 0),
        customer_with_balance(2, "10.5"),
        customer_with_balance(3, -3),
        customer_with_balance(4, "0.00"),
        customer_with_balance(5, 99),
    ]

    ranked = rank_outstanding(customers)

    assert all(c.balance != 0 for c in ranked)
    assert [c.id for c in ranked] == [5, 2, 3]
    magnitudes = [abs(c.balance) for c in ranked]
    assert magnitudes == sorted(magnitudes, reverse=True)


def test_asha_ranks_ahead_of_smaller_negative_balance(asha, ravi):
    assert rank_outstanding([ravi, asha]) == [asha, ravi]


def test_customer_transactions_newest_first(sample_transactions):
    ordered = customer_transactions(1, sample_transactions)

    assert [t.id for t in ordered] == [3, 2, 1]


def test_customer_transactions_stable_on_same_date():
    same_day = date(2024, 1, 1)
    first = make_transaction(1, CREDIT, 1, same_day, id=10)
    second = make_transaction(1, DEBIT, 1, same_day, id=11)

    assert [t.id for t in customer_transactions(1, [first, second])] == [10, 11]


def test_most_recent_transaction(sample_transactions):
    assert most_recent_transaction(1, sample_transactions).id == 3
    assert most_recent_transaction(42, sample_transactions) is None


def test_dashboard_stats(asha, ravi):
    stats = dashboard_stats([asha, ravi, customer_with_balance(3, 0)])

    assert stats.total_credit == Decimal("600")
    assert stats.total_debit == Decimal("250")
    assert stats.net_balance == Decimal("350")
    assert stats.total_customers == 3
    assert stats.customers_with_positive_balance == 1
    assert stats.customers_with_negative_balance == 1


def test_dashboard_stats_empty():
    stats = dashboard_stats([])

    assert stats.net_balance == 0
    assert stats.total_customers == 0


def test_search_customers_by_name_and_mobile(asha, ravi):
    assert search_customers([asha, ravi], "kumar") == [ravi]
    assert search_customers([asha, ravi], "0100") == [asha]
    assert search_customers([asha, ravi], "") == [asha, ravi]
    assert search_customers([asha, ravi], "nobody") == []


def test_filter_transactions_by_term_and_type(sample_transactions):
    assert [t.id for t in filter_transactions(sample_transactions, "asha")] == [1, 2, 3]
    assert [t.id for t in filter_transactions(sample_transactions, "", DEBIT)] == [2, 4]
    assert [t.id for t in filter_transactions(sample_transactions, "555-0100", CREDIT)] == [1, 3]
