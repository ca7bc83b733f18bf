"""Labour models."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


@dataclass
class LabourPayment:
    """Outflow paid to a labourer."""

    id: str
    date: datetime
    amount: Decimal


@dataclass
class Labour:
    """Labourer with embedded payments."""

    id: str | None
    name: str
    phone: str
    payments: list[LabourPayment] = field(default_factory=list)
    created_at: datetime | None = None
