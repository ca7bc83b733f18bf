"""Tests for LedgerService mutations over the in-memory store."""

import asyncio
from decimal import Decimal

import pytest

from ab_ledger.exceptions import (
    ConflictError,
    EntityNotFoundError,
    StorageUnavailableError,
    SubEntityNotFoundError,
    ValidationError,
)
from ab_ledger.ledger import calculate_summary
from ab_ledger.models import PaymentMode, TransactionType
from ab_ledger.service import LedgerService
from ab_ledger.store import NOT_FOUND, MemoryGateway


def payment_for(customer_id: str, amount: str = "2500", tx_type: str = "CREDIT") -> dict:
    return {
        "customerId": customer_id,
        "amount": amount,
        "type": tx_type,
        "mode": "CASH",
        "date": "2024-07-10T09:00:00+05:30",
    }


class TestAddCustomer:
    """Tests for add_customer."""

    def test_seed_transactions(self, service: LedgerService, customer_payload: dict) -> None:
        """Seed amounts become a DEBIT and a CREDIT with the right balance."""
        customer = asyncio.run(service.add_customer(customer_payload))

        assert customer.id
        assert [t.type for t in customer.transactions] == [
            TransactionType.DEBIT,
            TransactionType.CREDIT,
        ]
        assert calculate_summary(customer.transactions).balance == Decimal("10000")
        assert customer.transactions[0].notes == "Initial bill from customer creation"
        assert all(t.bill_number == "AB-0001" for t in customer.transactions)

    def test_phone_prefixed(self, service: LedgerService, customer_payload: dict) -> None:
        customer = asyncio.run(service.add_customer(customer_payload))
        assert customer.phone == "+919876543210"

    def test_phone_not_prefixed_twice(self, service: LedgerService, customer_payload: dict) -> None:
        customer_payload["phone"] = "+919876543210"

        customer = asyncio.run(service.add_customer(customer_payload))

        assert customer.phone == "+919876543210"

    def test_no_seed_amounts(self, service: LedgerService, customer_payload: dict) -> None:
        customer_payload.pop("amountDue")
        customer_payload.pop("amountPaid")

        customer = asyncio.run(service.add_customer(customer_payload))

        assert customer.transactions == []

    def test_persisted(
        self, service: LedgerService, gateway: MemoryGateway, customer_payload: dict
    ) -> None:
        customer = asyncio.run(service.add_customer(customer_payload))
        stored = asyncio.run(gateway.find_customer_by_id(customer.id))

        assert stored.name == "Ravi Kumar"
        assert len(stored.transactions) == 2
        assert stored.created_at is not None

    def test_invalid_payload_not_stored(
        self, service: LedgerService, gateway: MemoryGateway, customer_payload: dict
    ) -> None:
        customer_payload["name"] = "R"

        with pytest.raises(ValidationError) as exc_info:
            asyncio.run(service.add_customer(customer_payload))

        assert "name" in exc_info.value.errors
        assert gateway.customers == {}

    def test_store_unavailable(self, gateway: MemoryGateway, customer_payload: dict) -> None:
        gateway.available = False

        with pytest.raises(StorageUnavailableError):
            asyncio.run(LedgerService(gateway).add_customer(customer_payload))


class TestUpdateCustomer:
    """Tests for update_customer."""

    def test_ledger_untouched(self, service: LedgerService, gateway: MemoryGateway, customer_payload: dict) -> None:
        customer = asyncio.run(service.add_customer(customer_payload))

        asyncio.run(
            service.update_customer(
                customer.id,
                {"name": "Ravi K", "phone": "9123456789", "address": "New Address 5", "billNumber": ""},
            )
        )

        stored = asyncio.run(gateway.find_customer_by_id(customer.id))
        assert stored.name == "Ravi K"
        assert stored.phone == "+919123456789"
        assert stored.bill_number is None
        assert stored.transactions == customer.transactions

    def test_missing_customer(self, service: LedgerService) -> None:
        with pytest.raises(EntityNotFoundError):
            asyncio.run(
                service.update_customer(
                    "00000000-0000-4000-8000-000000000000",
                    {"name": "Ravi", "phone": "9123456789", "address": "Somewhere"},
                )
            )

    def test_invalid(self, service: LedgerService, customer_payload: dict) -> None:
        customer = asyncio.run(service.add_customer(customer_payload))

        with pytest.raises(ValidationError):
            asyncio.run(service.update_customer(customer.id, {"name": "Ravi"}))


class TestDeleteCustomer:
    """Tests for delete_customer."""

    def test_cascade(self, service: LedgerService, gateway: MemoryGateway, customer_payload: dict) -> None:
        """Deleting a customer removes its whole ledger."""
        customer = asyncio.run(service.add_customer(customer_payload))
        asyncio.run(service.add_payment(payment_for(customer.id)))

        asyncio.run(service.delete_customer(customer.id))

        assert asyncio.run(gateway.find_customer_by_id(customer.id)) is NOT_FOUND
        assert gateway.summary()["transactions"] == 0

    def test_missing(self, service: LedgerService) -> None:
        with pytest.raises(EntityNotFoundError):
            asyncio.run(service.delete_customer("not-an-id"))


class TestTransactions:
    """Tests for payment add/update/delete."""

    @pytest.fixture
    def customer(self, service: LedgerService, customer_payload: dict):
        return asyncio.run(service.add_customer(customer_payload))

    def test_add_payment(self, service: LedgerService, gateway: MemoryGateway, customer) -> None:
        tx = asyncio.run(service.add_payment(payment_for(customer.id, "2500")))

        stored = asyncio.run(gateway.find_customer_by_id(customer.id))
        assert stored.transactions[-1] == tx
        assert tx.version == 1
        assert calculate_summary(stored.transactions).balance == Decimal("7500")

    def test_add_payment_unknown_customer(self, service: LedgerService) -> None:
        with pytest.raises(EntityNotFoundError):
            asyncio.run(service.add_payment(payment_for("00000000-0000-4000-8000-000000000000")))

    def test_add_payment_invalid(self, service: LedgerService, gateway: MemoryGateway, customer) -> None:
        with pytest.raises(ValidationError) as exc_info:
            asyncio.run(service.add_payment(payment_for(customer.id, "0")))

        assert exc_info.value.errors == {"amount": ["Amount must be greater than 0."]}
        assert gateway.summary()["transactions"] == 2

    def test_concurrent_appends(self, service: LedgerService, gateway: MemoryGateway, customer) -> None:
        """Concurrent appends to one customer are all kept."""

        async def append_many() -> None:
            await asyncio.gather(*(service.add_payment(payment_for(customer.id, "10")) for _ in range(20)))

        asyncio.run(append_many())

        stored = asyncio.run(gateway.find_customer_by_id(customer.id))
        assert len(stored.transactions) == 22

    def test_update_transaction(self, service: LedgerService, gateway: MemoryGateway, customer) -> None:
        target = customer.transactions[1]

        updated = asyncio.run(
            service.update_transaction(
                customer.id,
                target.id,
                {"amount": "6000", "type": "CREDIT", "mode": "UPI", "notes": "Corrected"},
            )
        )

        assert updated.id == target.id
        assert updated.version == 2
        assert updated.mode == PaymentMode.UPI
        stored = asyncio.run(gateway.find_customer_by_id(customer.id))
        assert [t.id for t in stored.transactions] == [t.id for t in customer.transactions]
        assert calculate_summary(stored.transactions).balance == Decimal("9000")

    def test_update_with_expected_version(self, service: LedgerService, customer) -> None:
        target = customer.transactions[0]
        data = {"amount": "20000", "type": "DEBIT", "mode": "OTHER"}

        asyncio.run(service.update_transaction(customer.id, target.id, data, expected_version=1))

        with pytest.raises(ConflictError):
            asyncio.run(service.update_transaction(customer.id, target.id, data, expected_version=1))

    def test_update_missing_transaction(self, service: LedgerService, customer) -> None:
        data = {"amount": "100", "type": "DEBIT", "mode": "CASH"}

        with pytest.raises(SubEntityNotFoundError):
            asyncio.run(service.update_transaction(customer.id, "missing", data))

    def test_delete_transaction(self, service: LedgerService, gateway: MemoryGateway, customer) -> None:
        asyncio.run(service.delete_transaction(customer.id, customer.transactions[1].id))

        stored = asyncio.run(gateway.find_customer_by_id(customer.id))
        assert [t.id for t in stored.transactions] == [customer.transactions[0].id]
        assert calculate_summary(stored.transactions).balance == Decimal("15000")

    def test_delete_missing_transaction(self, service: LedgerService, customer) -> None:
        with pytest.raises(SubEntityNotFoundError):
            asyncio.run(service.delete_transaction(customer.id, "missing"))

    def test_delete_stale_version(self, service: LedgerService, customer) -> None:
        with pytest.raises(ConflictError):
            asyncio.run(
                service.delete_transaction(customer.id, customer.transactions[0].id, expected_version=3)
            )


class TestLabour:
    """Tests for labour mutations."""

    def test_lifecycle(self, service: LedgerService, gateway: MemoryGateway) -> None:
        labour = asyncio.run(service.add_labour({"name": "Suresh", "phone": "9000000000"}))
        payment = asyncio.run(
            service.add_labour_payment({"labourId": labour.id, "amount": "750", "date": "2024-05-01T09:00:00"})
        )

        stored = asyncio.run(gateway.find_labour_by_id(labour.id))
        assert stored.payments == [payment]

        asyncio.run(service.update_labour(labour.id, {"name": "Suresh M", "phone": "9000000001"}))
        asyncio.run(service.delete_labour_payment(labour.id, payment.id))

        stored = asyncio.run(gateway.find_labour_by_id(labour.id))
        assert stored.name == "Suresh M"
        assert stored.payments == []

        asyncio.run(service.delete_labour(labour.id))
        assert asyncio.run(gateway.find_labour_by_id(labour.id)) is NOT_FOUND

    def test_delete_labour_with_payments(self, service: LedgerService, gateway: MemoryGateway) -> None:
        """Deleting a labourer takes its payments with it; others are untouched."""
        labour = asyncio.run(service.add_labour({"name": "Suresh", "phone": "9000000000"}))
        other = asyncio.run(service.add_labour({"name": "Imran", "phone": "9000000009"}))
        for amount in ("750", "1200"):
            asyncio.run(service.add_labour_payment({"labourId": labour.id, "amount": amount}))
        asyncio.run(service.add_labour_payment({"labourId": other.id, "amount": "300"}))

        asyncio.run(service.delete_labour(labour.id))

        assert asyncio.run(gateway.find_labour_by_id(labour.id)) is NOT_FOUND
        assert gateway.summary()["labours"] == 1
        assert gateway.summary()["labour_payments"] == 1

    def test_payment_to_missing_labour(self, service: LedgerService) -> None:
        with pytest.raises(EntityNotFoundError):
            asyncio.run(service.add_labour_payment({"labourId": "nobody", "amount": "10"}))

    def test_delete_missing_payment(self, service: LedgerService) -> None:
        labour = asyncio.run(service.add_labour({"name": "Suresh", "phone": "9000000000"}))

        with pytest.raises(SubEntityNotFoundError):
            asyncio.run(service.delete_labour_payment(labour.id, "missing"))
