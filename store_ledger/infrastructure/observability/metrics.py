"""Prometheus metrics for statement exports, ledger activity, and backend health"""

from prometheus_client import Counter, Histogram

# Statement export metrics
statement_export_counter = Counter(
    "store_statement_exports_total",
    "Statement exports attempted",
    ["outcome"],  # success | failure
)

statement_render_latency_histogram = Histogram(
    "store_statement_render_seconds",
    "Time to rasterize and assemble a statement",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

statement_pages_histogram = Histogram(
    "store_statement_pages",
    "Pages per exported statement",
    buckets=[1, 2, 3, 5, 10, 20, 50],
)

# Ledger metrics
transactions_recorded_counter = Counter(
    "store_transactions_recorded_total",
    "Transactions appended to the log",
    ["type"],  # CREDIT | DEBIT
)

aggregate_mismatch_counter = Counter(
    "store_aggregate_mismatch_total",
    "Customers whose backend totals disagreed with the transaction log",
)

# Store backend metrics
store_api_failures_counter = Counter(
    "store_api_failures_total",
    "Failed store backend calls",
    ["operation"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_statement_export(success: bool, page_count: int = 0) -> None:
    """Count an export and, when it produced a document, its page count"""
    statement_export_counter.labels(outcome="success" if success else "failure").inc()
    if success:
        statement_pages_histogram.observe(page_count)
