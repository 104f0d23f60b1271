"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from store_ledger.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_transaction_recorded(
    request_id: str,
    customer_id: int,
    transaction_id: int,
    transaction_type: str,
    balance: Decimal,
) -> None:
    """Log a transaction append together with the balance readers will now see"""
    logging.info(
        "Transaction recorded",
        extra={
            "request_id": request_id,
            "customer_id": customer_id,
            "transaction_id": transaction_id,
            "transaction_type": transaction_type,
            "balance": str(balance),
        },
    )


def log_statement_export(
    request_id: str,
    customer_id: int,
    transaction_count: int,
    page_count: int,
    duration_ms: float,
) -> None:
    """Log structured statement export outcome"""
    logging.info(
        "Statement exported",
        extra={
            "request_id": request_id,
            "customer_id": customer_id,
            "step": "statement_export",
            "transaction_count": transaction_count,
            "page_count": page_count,
            "duration_ms": duration_ms,
        },
    )
