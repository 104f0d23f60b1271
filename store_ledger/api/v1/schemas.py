"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from store_ledger.domain.models import Customer, DashboardStats, Transaction, TransactionType
from store_ledger.domain.statement import balance_label


class CustomerCreateRequest(BaseModel):
    """Request body for POST /v1/customers"""

    name: str = Field(..., min_length=1, description="Customer display name")
    mobile: str = Field(..., min_length=1, description="Mobile number, also used for search")


class TransactionCreateRequest(BaseModel):
    """Request body for POST /v1/transactions"""

    customer_id: int = Field(..., description="Owning customer")
    type: TransactionType
    amount: Decimal = Field(..., gt=0, allow_inf_nan=False, description="Positive amount")
    description: str = ""
    transaction_date: Optional[date] = Field(None, description="Business date, defaults to today")


class CustomerSchema(BaseModel):
    """Customer with aggregates"""

    id: int
    name: str
    mobile: str
    total_credit: Decimal
    total_debit: Decimal
    balance: Decimal
    balance_label: str

    @classmethod
    def from_domain(cls, customer: Customer) -> "CustomerSchema":
        return cls(
            id=customer.id,
            name=customer.name,
            mobile=customer.mobile,
            total_credit=customer.total_credit,
            total_debit=customer.total_debit,
            balance=customer.balance,
            balance_label=balance_label(customer.balance),
        )


class TransactionSchema(BaseModel):
    """Single ledger entry"""

    id: int
    customer_id: int
    customer_name: str
    customer_mobile: str
    type: TransactionType
    amount: Decimal
    description: Optional[str] = None
    transaction_date: date
    created_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, transaction: Transaction) -> "TransactionSchema":
        return cls(
            id=transaction.id,
            customer_id=transaction.customer_id,
            customer_name=transaction.customer_name,
            customer_mobile=transaction.customer_mobile,
            type=transaction.type,
            amount=transaction.amount,
            description=transaction.description,
            transaction_date=transaction.transaction_date,
            created_at=transaction.created_at,
        )


class TransactionCreateResponse(BaseModel):
    """Response for POST /v1/transactions: the entry plus refreshed aggregates"""

    transaction: TransactionSchema
    customer: CustomerSchema


class OutstandingItem(BaseModel):
    """Customer on the collections list"""

    customer: CustomerSchema
    last_transaction_date: Optional[date] = None


class OutstandingResponse(BaseModel):
    """Response for GET /v1/customers/outstanding"""

    customers: List[OutstandingItem]


class DashboardResponse(BaseModel):
    """Response for GET /v1/dashboard"""

    total_credit: Decimal
    total_debit: Decimal
    net_balance: Decimal
    total_customers: int
    customers_with_positive_balance: int
    customers_with_negative_balance: int

    @classmethod
    def from_domain(cls, stats: DashboardStats) -> "DashboardResponse":
        return cls(
            total_credit=stats.total_credit,
            total_debit=stats.total_debit,
            net_balance=stats.net_balance,
            total_customers=stats.total_customers,
            customers_with_positive_balance=stats.customers_with_positive_balance,
            customers_with_negative_balance=stats.customers_with_negative_balance,
        )


class RefreshResponse(BaseModel):
    """Response for POST /v1/refresh"""

    customer_count: int
    transaction_count: int
    refreshed_at: datetime


class BackupResponse(BaseModel):
    """Response for POST /v1/backup"""

    status: str
    message: str
    path: Optional[str] = None
