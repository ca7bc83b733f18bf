"""Tests for the summary/query facade."""

import asyncio
from decimal import Decimal

from ab_ledger.queries import LedgerQueries
from ab_ledger.service import LedgerService
from ab_ledger.store import NOT_FOUND, UNAVAILABLE, MemoryGateway


class TestCustomerQueries:
    """Tests for customer reads with computed summaries."""

    def test_summaries_attached(
        self, service: LedgerService, queries: LedgerQueries, customer_payload: dict
    ) -> None:
        customer = asyncio.run(service.add_customer(customer_payload))

        entries = asyncio.run(queries.get_customers())

        assert len(entries) == 1
        assert entries[0].customer.id == customer.id
        assert entries[0].total_due == Decimal("15000")
        assert entries[0].total_paid == Decimal("5000")
        assert entries[0].balance == Decimal("10000")

    def test_summary_follows_ledger_not_seed_amounts(
        self, service: LedgerService, queries: LedgerQueries, customer_payload: dict
    ) -> None:
        """Later payments change the balance; the flat seed amounts do not."""
        customer = asyncio.run(service.add_customer(customer_payload))
        asyncio.run(
            service.add_payment(
                {"customerId": customer.id, "amount": "10000", "type": "CREDIT", "mode": "UPI"}
            )
        )

        entry = asyncio.run(queries.get_customer_by_id(customer.id))

        assert entry.customer.amount_paid == Decimal("5000")
        assert entry.total_paid == Decimal("15000")
        assert entry.balance == Decimal("0")

    def test_empty_store(self, queries: LedgerQueries) -> None:
        assert asyncio.run(queries.get_customers()) == []

    def test_not_found(self, queries: LedgerQueries) -> None:
        assert asyncio.run(queries.get_customer_by_id("missing")) is NOT_FOUND

    def test_unavailable(self, gateway: MemoryGateway, queries: LedgerQueries) -> None:
        """A store outage is reported distinctly from an empty result."""
        gateway.available = False

        assert asyncio.run(queries.get_customers()) is UNAVAILABLE
        assert asyncio.run(queries.get_customer_by_id("missing")) is UNAVAILABLE


class TestLabourQueries:
    """Tests for labour reads."""

    def test_total_paid(self, service: LedgerService, queries: LedgerQueries) -> None:
        labour = asyncio.run(service.add_labour({"name": "Suresh", "phone": "9000000000"}))
        for amount in ("700", "800.50"):
            asyncio.run(service.add_labour_payment({"labourId": labour.id, "amount": amount}))

        entries = asyncio.run(queries.get_labours())
        entry = asyncio.run(queries.get_labour_by_id(labour.id))

        assert entries[0].total_paid == Decimal("1500.50")
        assert entry.total_paid == Decimal("1500.50")

    def test_not_found(self, queries: LedgerQueries) -> None:
        assert asyncio.run(queries.get_labour_by_id("missing")) is NOT_FOUND

    def test_unavailable(self, gateway: MemoryGateway, queries: LedgerQueries) -> None:
        gateway.available = False

        assert asyncio.run(queries.get_labours()) is UNAVAILABLE
        assert asyncio.run(queries.get_labour_by_id("missing")) is UNAVAILABLE
