"""Tests for portfolio analytics."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from ab_ledger.analytics import (
    balance_distribution,
    monthly_flow,
    portfolio_metrics,
    top_customers_by_due,
)
from ab_ledger.models import TransactionType
from ab_ledger.queries import with_summary


@pytest.fixture
def portfolio(make_customer, make_transaction):
    """Three customers: one owing, one settled, one in advance."""
    june = datetime(2024, 6, 15, tzinfo=timezone.utc)
    july = datetime(2024, 7, 2, tzinfo=timezone.utc)
    return [
        with_summary(
            make_customer(
                [
                    make_transaction("a1", "10000", TransactionType.DEBIT, date=june),
                    make_transaction("a2", "4000", TransactionType.CREDIT, date=july),
                ],
                id="a",
            )
        ),
        with_summary(
            make_customer(
                [
                    make_transaction("b1", "2000", TransactionType.DEBIT, date=july),
                    make_transaction("b2", "2000", TransactionType.CREDIT, date=july),
                ],
                id="b",
            )
        ),
        with_summary(
            make_customer(
                [make_transaction("c1", "500", TransactionType.CREDIT, date=june)],
                id="c",
            )
        ),
    ]


class TestPortfolioMetrics:
    def test_totals(self, portfolio) -> None:
        metrics = portfolio_metrics(portfolio)

        assert metrics.total_customers == 3
        assert metrics.total_due == Decimal("12000")
        assert metrics.total_paid == Decimal("6500")
        assert metrics.total_balance == Decimal("5500")

    def test_empty(self) -> None:
        metrics = portfolio_metrics([])

        assert metrics.total_customers == 0
        assert metrics.total_balance == Decimal("0")


class TestRankings:
    def test_top_by_due(self, portfolio) -> None:
        top = top_customers_by_due(portfolio, limit=2)

        assert [e.customer.id for e in top] == ["a", "b"]

    def test_distribution(self, portfolio) -> None:
        dist = balance_distribution(portfolio)

        assert (dist.owing, dist.settled, dist.in_advance) == (1, 1, 1)


class TestMonthlyFlow:
    """Tests for monthly_flow."""

    def test_grouped_by_month(self, portfolio) -> None:
        flow = monthly_flow(portfolio)

        assert [f.month for f in flow] == ["2024-06", "2024-07"]
        assert (flow[0].debit, flow[0].credit) == (Decimal("10000"), Decimal("500"))
        assert (flow[1].debit, flow[1].credit) == (Decimal("2000"), Decimal("6000"))

    def test_recent_months_only(self, portfolio) -> None:
        assert [f.month for f in monthly_flow(portfolio, months=1)] == ["2024-07"]
        assert monthly_flow(portfolio, months=0) == []
