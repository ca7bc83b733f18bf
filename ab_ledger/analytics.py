"""Portfolio-level aggregates over customers with summaries."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from ab_ledger.ledger import ZERO
from ab_ledger.models import TransactionType
from ab_ledger.queries import CustomerWithSummary


@dataclass(frozen=True)
class PortfolioMetrics:
    total_customers: int
    total_due: Decimal
    total_paid: Decimal
    total_balance: Decimal


@dataclass(frozen=True)
class BalanceDistribution:
    owing: int  # balance > 0
    settled: int  # balance == 0
    in_advance: int  # balance < 0


@dataclass(frozen=True)
class MonthlyFlow:
    month: str  # YYYY-MM
    debit: Decimal
    credit: Decimal


def portfolio_metrics(customers: Sequence[CustomerWithSummary]) -> PortfolioMetrics:
    return PortfolioMetrics(
        total_customers=len(customers),
        total_due=sum((c.total_due for c in customers), ZERO),
        total_paid=sum((c.total_paid for c in customers), ZERO),
        total_balance=sum((c.balance for c in customers), ZERO),
    )


def top_customers_by_due(
    customers: Sequence[CustomerWithSummary], limit: int = 10
) -> list[CustomerWithSummary]:
    """Customers with the largest billed totals, largest first."""
    return sorted(customers, key=lambda c: c.total_due, reverse=True)[:limit]


def balance_distribution(customers: Sequence[CustomerWithSummary]) -> BalanceDistribution:
    return BalanceDistribution(
        owing=sum(1 for c in customers if c.balance > 0),
        settled=sum(1 for c in customers if c.balance == 0),
        in_advance=sum(1 for c in customers if c.balance < 0),
    )


def monthly_flow(
    customers: Sequence[CustomerWithSummary], months: int | None = None
) -> list[MonthlyFlow]:
    """Billed and received amounts per calendar month, oldest first.

    Parameters
    ----------
    customers : Sequence[CustomerWithSummary]
        Customers whose ledgers are aggregated.
    months : int | None
        Keep only the most recent N months that have activity.
    """
    debit: dict[str, Decimal] = defaultdict(lambda: ZERO)
    credit: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for entry in customers:
        for tx in entry.customer.transactions:
            month = tx.date.strftime("%Y-%m")
            if tx.type == TransactionType.DEBIT:
                debit[month] += tx.amount
            elif tx.type == TransactionType.CREDIT:
                credit[month] += tx.amount

    keys = sorted(set(debit) | set(credit))
    if months is not None:
        keys = keys[-months:] if months > 0 else []
    return [MonthlyFlow(month=k, debit=debit[k], credit=credit[k]) for k in keys]
