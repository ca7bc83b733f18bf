"""Pytest configuration and fixtures."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from ab_ledger.actions import LedgerActions
from ab_ledger.models import Customer, PaymentMode, Transaction, TransactionType
from ab_ledger.queries import LedgerQueries
from ab_ledger.service import LedgerService
from ab_ledger.store import MemoryGateway
from ab_ledger.transfer import CustomerImporter


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def gateway() -> MemoryGateway:
    """Fresh in-memory store for each test."""
    return MemoryGateway()


@pytest.fixture
def service(gateway: MemoryGateway) -> LedgerService:
    return LedgerService(gateway)


@pytest.fixture
def queries(gateway: MemoryGateway) -> LedgerQueries:
    return LedgerQueries(gateway)


@pytest.fixture
def importer(gateway: MemoryGateway) -> CustomerImporter:
    return CustomerImporter(gateway)


@pytest.fixture
def actions(service: LedgerService) -> LedgerActions:
    return LedgerActions(service)


@pytest.fixture
def customer_payload() -> dict:
    """Valid add_customer payload."""
    return {
        "name": "Ravi Kumar",
        "phone": "9876543210",
        "address": "12 MG Road, Bengaluru",
        "billNumber": "AB-0001",
        "amountDue": "15000",
        "amountPaid": "5000",
    }


@pytest.fixture
def sample_date() -> datetime:
    return datetime(2024, 7, 1, 10, 30, tzinfo=timezone.utc)


def _make_transaction(
    tx_id: str,
    amount: str,
    tx_type: TransactionType | str,
    date: datetime | None = None,
    mode: PaymentMode = PaymentMode.CASH,
    notes: str | None = None,
) -> Transaction:
    """Build a transaction for tests."""
    return Transaction(
        id=tx_id,
        date=date or datetime(2024, 7, 1, tzinfo=timezone.utc),
        amount=Decimal(amount),
        type=tx_type,
        mode=mode,
        notes=notes,
    )


def _make_customer(transactions: list[Transaction] | None = None, **kwargs) -> Customer:
    """Build a stored-looking customer for tests."""
    fields = {
        "id": "c0ffee00-0000-4000-8000-000000000001",
        "name": "Asha Patel",
        "phone": "+919812345678",
        "address": "4 Park Street, Kolkata",
    }
    fields.update(kwargs)
    return Customer(transactions=transactions or [], **fields)


@pytest.fixture
def make_transaction():
    """Factory for transactions."""
    return _make_transaction


@pytest.fixture
def make_customer():
    """Factory for stored-looking customers."""
    return _make_customer
