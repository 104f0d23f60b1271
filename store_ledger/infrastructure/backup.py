"""Local JSON snapshot of customers and the transaction log"""

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Sequence

from store_ledger.domain.aggregation import dashboard_stats
from store_ledger.domain.models import Customer, Transaction

BACKUP_VERSION = "1.0"


def _customer_dict(customer: Customer) -> Dict[str, Any]:
    return {
        "id": customer.id,
        "name": customer.name,
        "mobile": customer.mobile,
        "totalCredit": str(customer.total_credit),
        "totalDebit": str(customer.total_debit),
        "balance": str(customer.balance),
        "createdAt": customer.created_at.isoformat() if customer.created_at else None,
        "updatedAt": customer.updated_at.isoformat() if customer.updated_at else None,
    }


def _transaction_dict(transaction: Transaction) -> Dict[str, Any]:
    return {
        "id": transaction.id,
        "customerId": transaction.customer_id,
        "customerName": transaction.customer_name,
        "customerMobile": transaction.customer_mobile,
        "type": transaction.type.value,
        "amount": str(transaction.amount),
        "description": transaction.description,
        "transactionDate": transaction.transaction_date.isoformat(),
        "createdAt": transaction.created_at.isoformat() if transaction.created_at else None,
    }


def build_backup_snapshot(
    customers: Sequence[Customer],
    transactions: Sequence[Transaction],
    exported_at: datetime,
) -> Dict[str, Any]:
    """Everything needed to restore the ledger, plus a summary for quick inspection"""
    stats = dashboard_stats(customers)
    return {
        "customers": [_customer_dict(c) for c in customers],
        "transactions": [_transaction_dict(t) for t in transactions],
        "exportDate": exported_at.isoformat(),
        "version": BACKUP_VERSION,
        "totalCustomers": len(customers),
        "totalTransactions": len(transactions),
        "summary": {
            "totalCredit": str(stats.total_credit),
            "totalDebit": str(stats.total_debit),
            "netBalance": str(stats.net_balance),
            "customersWithBalance": stats.customers_with_positive_balance,
            "customersInDebt": stats.customers_with_negative_balance,
        },
    }


def write_backup(snapshot: Dict[str, Any], directory: Path, file_name: str) -> Path:
    """Overwrite the backup file atomically"""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / file_name

    fd, tmp_name = tempfile.mkstemp(dir=directory, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as tmp:
            json.dump(snapshot, tmp, indent=2)
        os.replace(tmp_name, path)
    except BaseException:
        os.unlink(tmp_name)
        raise

    logging.info("Backup file created", extra={"path": str(path.resolve())})
    return path
