"""Ledger domain models."""

from ab_ledger.models.customer import Customer
from ab_ledger.models.enums import PaymentMode, SummaryKind, TransactionType
from ab_ledger.models.labour import Labour, LabourPayment
from ab_ledger.models.transaction import Transaction

__all__ = [
    "Customer",
    "Labour",
    "LabourPayment",
    "PaymentMode",
    "SummaryKind",
    "Transaction",
    "TransactionType",
]
