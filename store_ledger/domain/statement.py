"""Customer account statement - document structure independent of rendering"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Sequence

from store_ledger.domain.models import ZERO, Customer, Transaction, TransactionType

REPORT_TITLE = "Customer Transaction Report"
EMPTY_STATE_MESSAGE = "No transactions found for this customer."
MISSING_DESCRIPTION = "No description"

CREDIT_COLOR = "#28a745"
DEBIT_COLOR = "#007bff"
NEGATIVE_COLOR = "#dc3545"


@dataclass(frozen=True)
class SummaryCard:
    label: str
    value: str
    color: str
    caption: str = ""


@dataclass(frozen=True)
class StatementRow:
    date: str
    type: str
    amount: str
    description: str
    color: str


@dataclass(frozen=True)
class StatementDocument:
    """
    Sections in print order: title, identity, summary, transaction table
    (or empty-state message), footer.
    """

    title: str
    customer_name: str
    identity: List[tuple[str, str]]
    summary: List[SummaryCard]
    rows: List[StatementRow] = field(default_factory=list)
    empty_message: str | None = None
    footer: str = ""


def format_money(amount: Decimal, currency_symbol: str = "") -> str:
    """Thousands separators, stored precision kept: Decimal("1234.50") -> "1,234.50" """
    return f"{currency_symbol}{amount:,}"


def balance_label(balance: Decimal) -> str:
    """Direction of a balance as shown to the store owner"""
    if balance > ZERO:
        return "Owes You"
    if balance < ZERO:
        return "You Owe"
    return "Settled"


def build_statement(
    customer: Customer,
    transactions: Sequence[Transaction],
    generated_at: datetime,
    currency_symbol: str = "",
) -> StatementDocument:
    """
    Lay out a statement for one customer.

    Args:
        customer: Customer with current aggregates
        transactions: That customer's transactions, already ordered newest first
        generated_at: Timestamp printed in the footer
        currency_symbol: Prefix for every money value
    """
    summary = [
        SummaryCard("Total Credit", format_money(customer.total_credit, currency_symbol), CREDIT_COLOR),
        SummaryCard("Total Debit", format_money(customer.total_debit, currency_symbol), DEBIT_COLOR),
        SummaryCard(
            "Current Balance",
            format_money(abs(customer.balance), currency_symbol),
            CREDIT_COLOR if customer.balance >= ZERO else NEGATIVE_COLOR,
            caption=balance_label(customer.balance),
        ),
    ]

    rows = [
        StatementRow(
            date=t.transaction_date.strftime("%b %d, %Y"),
            type=t.type.value,
            amount=format_money(t.amount, currency_symbol),
            description=t.description or MISSING_DESCRIPTION,
            color=CREDIT_COLOR if t.type == TransactionType.CREDIT else DEBIT_COLOR,
        )
        for t in transactions
    ]

    return StatementDocument(
        title=REPORT_TITLE,
        customer_name=customer.name,
        identity=[("Customer ID", str(customer.id)), ("Mobile", customer.mobile)],
        summary=summary,
        rows=rows,
        empty_message=None if rows else EMPTY_STATE_MESSAGE,
        footer=f"Generated on {generated_at.strftime('%b %d, %Y %H:%M')}",
    )


def export_filename(customer: Customer, export_date: date) -> str:
    """
    Download name for a statement, e.g. "Asha_Rao_transactions_2024-05-01.pdf".

    Whitespace runs collapse to one underscore; characters unsafe in file
    names are dropped.
    """
    name = re.sub(r"\s+", "_", customer.name.strip())
    name = re.sub(r"[^\w.-]", "", name) or "customer"
    return f"{name}_transactions_{export_date.isoformat()}.pdf"
