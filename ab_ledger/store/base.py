"""Persistence gateway contract shared by every store backend."""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from ab_ledger.models import Customer, Labour, LabourPayment, Transaction


class Outcome(str, Enum):
    """Sentinels returned by read paths instead of raising."""

    NOT_FOUND = "NOT_FOUND"
    CONNECTION_FAILURE = "CONNECTION_FAILURE"
    UNAVAILABLE = "UNAVAILABLE"


NOT_FOUND = Outcome.NOT_FOUND
CONNECTION_FAILURE = Outcome.CONNECTION_FAILURE
UNAVAILABLE = Outcome.UNAVAILABLE


def parse_identifier(value: Any) -> uuid.UUID | None:
    """Map an opaque string id to the store's key type.

    Returns ``None`` for anything that is not a well-formed identifier, so
    callers can treat it exactly like a missing record.
    """
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str):
        return None
    try:
        return uuid.UUID(value)
    except ValueError:
        return None


class LedgerGateway(ABC):
    """CRUD over customer and labour documents.

    Read paths return :data:`CONNECTION_FAILURE` when the store is
    unreachable and :data:`NOT_FOUND` for missing or malformed ids. Write
    paths raise :class:`~ab_ledger.exceptions.StorageUnavailableError`,
    :class:`~ab_ledger.exceptions.EntityNotFoundError` or
    :class:`~ab_ledger.exceptions.ConflictError`. Every write touches a
    single document.
    """

    # Customers
    @abstractmethod
    async def find_all_customers(self) -> list[Customer] | Outcome: ...

    @abstractmethod
    async def find_customer_by_id(self, customer_id: str) -> Customer | Outcome: ...

    @abstractmethod
    async def find_customer_by_phone(self, phone: str) -> Customer | None:
        """Write-path lookup used for duplicate detection."""

    @abstractmethod
    async def insert_customer(self, customer: Customer) -> Customer:
        """Persist a new customer and return it with its assigned id."""

    @abstractmethod
    async def update_customer_fields(self, customer_id: str, changes: dict[str, Any]) -> None:
        """Overwrite top-level fields; never touches ``transactions``."""

    @abstractmethod
    async def delete_customer(self, customer_id: str) -> None: ...

    # Transactions
    @abstractmethod
    async def append_transaction(self, customer_id: str, transaction: Transaction) -> None: ...

    @abstractmethod
    async def replace_transaction(
        self,
        customer_id: str,
        transaction: Transaction,
        expected_version: int | None = None,
    ) -> Transaction:
        """Replace a transaction in place and return it with its new version."""

    @abstractmethod
    async def remove_transaction(
        self,
        customer_id: str,
        transaction_id: str,
        expected_version: int | None = None,
    ) -> None: ...

    # Labour
    @abstractmethod
    async def find_all_labours(self) -> list[Labour] | Outcome: ...

    @abstractmethod
    async def find_labour_by_id(self, labour_id: str) -> Labour | Outcome: ...

    @abstractmethod
    async def insert_labour(self, labour: Labour) -> Labour: ...

    @abstractmethod
    async def update_labour_fields(self, labour_id: str, changes: dict[str, Any]) -> None: ...

    @abstractmethod
    async def delete_labour(self, labour_id: str) -> None: ...

    @abstractmethod
    async def append_labour_payment(self, labour_id: str, payment: LabourPayment) -> None: ...

    @abstractmethod
    async def remove_labour_payment(self, labour_id: str, payment_id: str) -> None: ...
