"""Customer model for the ledger."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from ab_ledger.models.transaction import Transaction


@dataclass
class Customer:
    """Customer record with its embedded transaction ledger.

    ``amount_paid`` and ``amount_due`` only seed the ledger at creation or
    import time; the balance always comes from ``transactions``.
    """

    id: str | None
    name: str
    phone: str
    address: str
    bill_number: str | None = None
    amount_paid: Decimal | None = None
    amount_due: Decimal | None = None
    transactions: list[Transaction] = field(default_factory=list)
    created_at: datetime | None = None
