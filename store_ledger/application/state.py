"""Owned application state: customers, the transaction log, and the refresh protocol"""

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from store_ledger.config import settings
from store_ledger.domain import aggregation
from store_ledger.domain.exceptions import (
    CustomerNotFoundError,
    InvalidTransactionAmountError,
    StatementRenderError,
    StoreAPIError,
)
from store_ledger.domain.models import Customer, DashboardStats, LedgerTotals, Transaction, TransactionType
from store_ledger.domain.statement import StatementDocument, build_statement, export_filename
from store_ledger.infrastructure.backup import build_backup_snapshot, write_backup
from store_ledger.infrastructure.clients.store_api import StoreClient
from store_ledger.infrastructure.observability.metrics import (
    aggregate_mismatch_counter,
    record_statement_export,
    statement_render_latency_histogram,
    transactions_recorded_counter,
)
from store_ledger.infrastructure.rendering.statement_pdf import StatementRasterizer, write_statement


@dataclass(frozen=True)
class StatementExport:
    filename: str
    pdf_bytes: bytes
    page_count: int
    transaction_count: int


def materialize(customers: Sequence[Customer], transactions: Sequence[Transaction]) -> Dict[int, Customer]:
    """
    Recompute every customer's aggregates from the transaction log.

    Backend totals are only compared: a mismatch is logged and counted, and
    the log wins.
    """
    materialized: Dict[int, Customer] = {}
    for customer in customers:
        totals = aggregation.aggregate(customer.id, transactions)
        if totals != customer.totals:
            aggregate_mismatch_counter.inc()
            logging.warning(
                "Backend aggregates disagree with transaction log",
                extra={
                    "customer_id": customer.id,
                    "backend_balance": str(customer.balance),
                    "ledger_balance": str(totals.balance),
                },
            )
        materialized[customer.id] = customer.with_totals(totals)
    return materialized


class LedgerState:
    """
    In-memory view of the store's customers and transaction log.

    Collections are replaced, never mutated in place, so a reader holding a
    list (e.g. a statement rendering in a worker thread) keeps a consistent
    snapshot.
    """

    def __init__(self, client: StoreClient | None = None):
        self.client = client or StoreClient()
        self._customers: Dict[int, Customer] = {}
        self._transactions: List[Transaction] = []
        # created through this state but not yet seen in a backend listing
        self._unconfirmed_customers: Dict[int, Customer] = {}
        self._unconfirmed_transactions: Dict[int, Transaction] = {}
        self.last_refreshed_at: Optional[datetime] = None

    @property
    def customers(self) -> List[Customer]:
        return list(self._customers.values())

    @property
    def transactions(self) -> List[Transaction]:
        return list(self._transactions)

    def get_customer(self, customer_id: int) -> Customer:
        try:
            return self._customers[customer_id]
        except KeyError:
            raise CustomerNotFoundError(f"Customer {customer_id} not found") from None

    async def refresh(self) -> None:
        """
        Reload customers and transactions from the backend.

        Either both collections are replaced or neither is. Customers and
        transactions created here that the backend does not list yet are kept.

        Raises:
            StoreAPIError: a backend call failed
            InvalidTransactionAmountError: the log contains an unusable amount
        """
        results = await asyncio.gather(
            self.client.list_customers(),
            self.client.list_transactions(),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        customers, transactions = results

        customers, transactions, pending_customers, pending_transactions = self._carry_unconfirmed(
            customers, transactions
        )
        materialized = materialize(customers, transactions)

        self._customers = materialized
        self._transactions = transactions
        self._unconfirmed_customers = pending_customers
        self._unconfirmed_transactions = pending_transactions
        self.last_refreshed_at = datetime.now()
        logging.info(
            "Ledger refreshed",
            extra={"customer_count": len(customers), "transaction_count": len(transactions)},
        )

    def _carry_unconfirmed(
        self,
        customers: Sequence[Customer],
        transactions: Sequence[Transaction],
    ) -> Tuple[List[Customer], List[Transaction], Dict[int, Customer], Dict[int, Transaction]]:
        """
        Merge records created here that a fetched snapshot does not list yet.

        The backend may answer a listing with data read before our own create
        landed. Such records stay pending until a listing includes them.
        """
        fetched_customer_ids = {c.id for c in customers}
        fetched_transaction_ids = {t.id for t in transactions}
        pending_customers = {
            id: c for id, c in self._unconfirmed_customers.items() if id not in fetched_customer_ids
        }
        pending_transactions = {
            id: t for id, t in self._unconfirmed_transactions.items() if id not in fetched_transaction_ids
        }
        if pending_customers or pending_transactions:
            logging.warning(
                "Backend snapshot predates local writes, keeping them",
                extra={
                    "pending_customer_ids": sorted(pending_customers),
                    "pending_transaction_ids": sorted(pending_transactions),
                },
            )
        return (
            [*customers, *pending_customers.values()],
            [*transactions, *pending_transactions.values()],
            pending_customers,
            pending_transactions,
        )

    async def create_customer(self, name: str, mobile: str) -> Customer:
        created = await self.client.create_customer(name, mobile)
        customer = created.with_totals(LedgerTotals())
        self._customers = {**self._customers, customer.id: customer}
        self._unconfirmed_customers = {**self._unconfirmed_customers, customer.id: customer}
        return customer

    async def record_transaction(
        self,
        customer_id: int,
        type: TransactionType,
        amount: Decimal,
        description: str = "",
        transaction_date: date | None = None,
    ) -> Tuple[Transaction, Customer]:
        """
        Append a transaction and return it with the customer's refreshed aggregates.

        1. POST the transaction (failure leaves local state untouched)
        2. Append it locally and apply it to the customer's aggregates
        3. Re-fetch everything from the backend to reconcile

        A failed step 3 is logged; the locally applied totals already match the log.
        A step 3 snapshot that predates the POST keeps the new transaction.
        """
        customer = self.get_customer(customer_id)
        amount = aggregation.check_amount(amount, "New transaction")

        created = await self.client.create_transaction(
            customer_id=customer_id,
            type=type,
            amount=amount,
            description=description,
            transaction_date=transaction_date,
        )
        try:
            updated = aggregation.record_transaction(customer, created)
        except ValueError as e:
            raise StoreAPIError(f"Backend returned a transaction for another customer: {e}") from e

        self._transactions = [*self._transactions, created]
        self._customers = {**self._customers, customer_id: updated}
        self._unconfirmed_transactions = {**self._unconfirmed_transactions, created.id: created}
        transactions_recorded_counter.labels(type=created.type.value).inc()

        try:
            await self.refresh()
        except (StoreAPIError, InvalidTransactionAmountError) as e:
            logging.warning(
                f"Refresh after transaction failed, keeping local aggregates: {e}",
                extra={"customer_id": customer_id, "transaction_id": created.id},
            )

        return created, self.get_customer(customer_id)

    def customer_transactions(self, customer_id: int) -> List[Transaction]:
        self.get_customer(customer_id)
        return aggregation.customer_transactions(customer_id, self._transactions)

    def search_customers(self, term: str = "") -> List[Customer]:
        return aggregation.search_customers(self._customers.values(), term)

    def filter_transactions(self, term: str = "", type: Optional[TransactionType] = None) -> List[Transaction]:
        return aggregation.filter_transactions(self._transactions, term, type)

    def outstanding(self) -> List[Tuple[Customer, Optional[Transaction]]]:
        """Ranked outstanding customers with their most recent transaction"""
        transactions = self._transactions
        return [
            (c, aggregation.most_recent_transaction(c.id, transactions))
            for c in aggregation.rank_outstanding(self._customers.values())
        ]

    def dashboard(self) -> DashboardStats:
        return aggregation.dashboard_stats(self.customers)

    def build_statement(self, customer_id: int, generated_at: datetime | None = None) -> StatementDocument:
        customer = self.get_customer(customer_id)
        return build_statement(
            customer,
            aggregation.customer_transactions(customer_id, self._transactions),
            generated_at or datetime.now(),
            settings.currency_symbol,
        )

    def export_statement(
        self,
        customer_id: int,
        generated_at: datetime | None = None,
        rasterizer: StatementRasterizer | None = None,
    ) -> StatementExport:
        """
        Render one customer's statement as a paged PDF.

        Raises:
            CustomerNotFoundError: unknown customer
            StatementRenderError: rendering failed (no artifact produced)
        """
        generated_at = generated_at or datetime.now()
        customer = self.get_customer(customer_id)
        document = self.build_statement(customer_id, generated_at)
        rasterizer = rasterizer or StatementRasterizer()

        start_time = time.time()
        try:
            rendered = rasterizer.render(document)
        except StatementRenderError:
            record_statement_export(success=False)
            raise
        statement_render_latency_histogram.observe(time.time() - start_time)
        record_statement_export(success=True, page_count=rendered.page_count)

        return StatementExport(
            filename=export_filename(customer, generated_at.date()),
            pdf_bytes=rendered.pdf_bytes,
            page_count=rendered.page_count,
            transaction_count=len(document.rows),
        )

    def save_statement(self, customer_id: int, directory: Path, generated_at: datetime | None = None) -> Path:
        """Export a statement and write it under its download filename"""
        export = self.export_statement(customer_id, generated_at)
        return write_statement(Path(directory) / export.filename, export.pdf_bytes)

    def backup(self, directory: Path | None = None, file_name: str | None = None) -> Path:
        """Write a JSON snapshot of the current state to the backup file"""
        snapshot = build_backup_snapshot(self.customers, self.transactions, datetime.now())
        return write_backup(
            snapshot,
            Path(directory or settings.backup_dir),
            file_name or settings.backup_file_name,
        )
