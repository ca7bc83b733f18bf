"""Customer statements, rupee formatting and reminder messages."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from urllib.parse import quote

from ab_ledger.ledger import ZERO, LedgerSummary, calculate_summary, utcnow
from ab_ledger.models import Customer, Transaction, TransactionType
from ab_ledger.queries import CustomerWithSummary

BUSINESS_NAME = "AB INTERIOR"

# Characters encodeURIComponent leaves as-is.
_URI_SAFE = "-_.!~*'()"

DEFAULT_REMINDER_TEMPLATE = (
    "Hello {name}, this is a message from " + BUSINESS_NAME + ". "
    "Your current balance is {balance}. Thank you for your business!"
)


@dataclass
class StatementLine:
    transaction: Transaction
    running_balance: Decimal


@dataclass
class Statement:
    """Ledger of one customer in date order with a running balance."""

    customer: Customer
    summary: LedgerSummary
    lines: list[StatementLine] = field(default_factory=list)
    generated_at: datetime | None = None

    @property
    def closing_balance(self) -> Decimal:
        return self.summary.balance


def build_statement(customer: Customer, now: datetime | None = None) -> Statement:
    """Sort the ledger by date (ties keep stored order) and accumulate balances.

    Entries with an unrecognized type appear on the statement but leave the
    running balance unchanged.
    """
    running = ZERO
    lines: list[StatementLine] = []
    for tx in sorted(customer.transactions, key=lambda t: t.date):
        if tx.type == TransactionType.DEBIT:
            running += tx.amount
        elif tx.type == TransactionType.CREDIT:
            running -= tx.amount
        lines.append(StatementLine(transaction=tx, running_balance=running))
    return Statement(
        customer=customer,
        summary=calculate_summary(customer.transactions),
        lines=lines,
        generated_at=now or utcnow(),
    )


def format_inr(amount: Decimal | int | float) -> str:
    """Format as Indian rupees with lakh/crore grouping, e.g. ``₹1,00,000.00``."""
    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    whole, _, fraction = f"{abs(value):.2f}".partition(".")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])
    return f"{sign}₹{whole}.{fraction}"


def render_reminder(entry: CustomerWithSummary, template: str = DEFAULT_REMINDER_TEMPLATE) -> str:
    """Fill the ``{name}`` and ``{balance}`` placeholders of a reminder message."""
    return template.replace("{name}", entry.customer.name).replace(
        "{balance}", format_inr(entry.balance)
    )


def whatsapp_link(phone: str, message: str) -> str:
    """Build a wa.me link; numbers without a country code are taken as Indian."""
    number = phone.strip()
    if number.startswith("+"):
        number = number[1:]
    elif not number.startswith("91"):
        number = "91" + number.lstrip("0")
    return f"https://wa.me/{number}?text={quote(message, safe=_URI_SAFE)}"
