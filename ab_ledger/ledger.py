"""Balance computation and seed-transaction rules.

Everything here is pure: no I/O, no clock access unless ``now`` is omitted.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from ab_ledger.models import LabourPayment, PaymentMode, Transaction, TransactionType

ZERO = Decimal("0")


@dataclass(frozen=True)
class LedgerSummary:
    """Derived totals of a customer ledger. Never persisted."""

    total_due: Decimal = ZERO
    total_paid: Decimal = ZERO

    @property
    def balance(self) -> Decimal:
        """Positive when the customer owes money."""
        return self.total_due - self.total_paid


class SeedSource(str, Enum):
    """Where seed transactions originate; selects the explanatory note."""

    CREATION = "customer creation"
    IMPORT = "import"

    @property
    def bill_note(self) -> str:
        return f"Initial bill from {self.value}"

    @property
    def payment_note(self) -> str:
        return f"Initial payment from {self.value}"


def new_id() -> str:
    """Generate an opaque identifier."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def calculate_summary(transactions: Iterable[Transaction] | None) -> LedgerSummary:
    """Compute ``total_due``, ``total_paid`` and ``balance`` from a ledger.

    Parameters
    ----------
    transactions : Iterable[Transaction] | None
        Ledger entries in any order. ``None`` is treated as empty.

    Returns
    -------
    LedgerSummary
        DEBIT amounts summed into ``total_due``, CREDIT amounts into
        ``total_paid``. Entries with any other ``type`` are skipped.
    """
    total_due = ZERO
    total_paid = ZERO
    for tx in transactions or ():
        if tx.type == TransactionType.DEBIT:
            total_due += tx.amount
        elif tx.type == TransactionType.CREDIT:
            total_paid += tx.amount
    return LedgerSummary(total_due=total_due, total_paid=total_paid)


def total_paid_to_labour(payments: Iterable[LabourPayment] | None) -> Decimal:
    """Sum every payment made to a labourer."""
    return sum((p.amount for p in payments or ()), ZERO)


def synthesize_seed_transactions(
    amount_due: Decimal | None,
    amount_paid: Decimal | None,
    bill_number: str | None = None,
    source: SeedSource = SeedSource.CREATION,
    now: datetime | None = None,
) -> list[Transaction]:
    """Turn flat seed amounts into ledger entries.

    A positive ``amount_due`` yields one DEBIT and a positive ``amount_paid``
    yields one CREDIT; the two conditions are independent.

    Parameters
    ----------
    amount_due : Decimal | None
        Amount billed to the customer.
    amount_paid : Decimal | None
        Amount already received.
    bill_number : str | None
        Copied onto each synthesized entry.
    source : SeedSource
        Selects the note attached to the entries.
    now : datetime | None
        Timestamp for the entries (default: current UTC time).

    Returns
    -------
    list[Transaction]
        Zero, one or two transactions, DEBIT first.
    """
    when = now or utcnow()
    seeds: list[Transaction] = []
    if amount_due is not None and amount_due > 0:
        seeds.append(
            Transaction(
                id=new_id(),
                date=when,
                amount=amount_due,
                type=TransactionType.DEBIT,
                mode=PaymentMode.OTHER,
                bill_number=bill_number,
                notes=source.bill_note,
            )
        )
    if amount_paid is not None and amount_paid > 0:
        seeds.append(
            Transaction(
                id=new_id(),
                date=when,
                amount=amount_paid,
                type=TransactionType.CREDIT,
                mode=PaymentMode.OTHER,
                bill_number=bill_number,
                notes=source.payment_note,
            )
        )
    return seeds


def normalize_phone(phone: str | None, prefix: str = "+91") -> str:
    """Prefix a phone number with the country code unless already present."""
    value = (phone or "").strip()
    if not value or value.startswith(prefix):
        return value
    return f"{prefix}{value}"
