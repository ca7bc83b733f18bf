"""Transaction model for the customer ledger."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from ab_ledger.models.enums import PaymentMode, TransactionType


@dataclass
class Transaction:
    """A single ledger entry owned by exactly one customer.

    ``type`` holds the raw stored string when a record carries a value outside
    :class:`TransactionType`; such entries count towards neither total.
    """

    id: str
    date: datetime
    amount: Decimal
    type: TransactionType | str
    mode: PaymentMode | str = PaymentMode.OTHER
    bill_number: str | None = None
    notes: str | None = None
    version: int = 1
