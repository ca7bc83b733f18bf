"""Enumeration types for ledger entities."""

from enum import Enum


class TransactionType(str, Enum):
    DEBIT = "DEBIT"  # bill/charge, increases what the customer owes
    CREDIT = "CREDIT"  # payment received


class PaymentMode(str, Enum):
    CASH = "CASH"
    UPI = "UPI"
    CARD = "CARD"
    OTHER = "OTHER"


class SummaryKind(str, Enum):
    LATEST = "latest"
    ALL = "all"
    BALANCE = "balance"
