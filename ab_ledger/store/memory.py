"""In-memory document store with the same semantics as the PostgreSQL backend."""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any

from ab_ledger.exceptions import (
    ConflictError,
    EntityNotFoundError,
    StorageUnavailableError,
    SubEntityNotFoundError,
)
from ab_ledger.ledger import new_id, utcnow
from ab_ledger.models import Customer, Labour, LabourPayment, Transaction
from ab_ledger.serialization import (
    customer_from_document,
    customer_to_document,
    labour_from_document,
    labour_to_document,
    payment_to_document,
    transaction_from_document,
    transaction_to_document,
)
from ab_ledger.store.base import (
    CONNECTION_FAILURE,
    NOT_FOUND,
    LedgerGateway,
    Outcome,
    parse_identifier,
)

logger = logging.getLogger(__name__)


@dataclass
class MemoryGateway(LedgerGateway):
    """Dict-backed gateway holding one document per customer and labourer.

    Documents are deep-copied on the way in and out so callers never share
    state with the store. Set ``available`` to ``False`` to simulate an
    unreachable store.
    """

    customers: dict[str, dict[str, Any]] = field(default_factory=dict)
    labours: dict[str, dict[str, Any]] = field(default_factory=dict)
    available: bool = True

    def _check_available(self) -> None:
        if not self.available:
            raise StorageUnavailableError("In-memory store marked unavailable")

    def _customer_doc(self, customer_id: str) -> dict[str, Any]:
        key = parse_identifier(customer_id)
        doc = self.customers.get(str(key)) if key else None
        if doc is None:
            raise EntityNotFoundError(f"Customer {customer_id} not found")
        return doc

    def _labour_doc(self, labour_id: str) -> dict[str, Any]:
        key = parse_identifier(labour_id)
        doc = self.labours.get(str(key)) if key else None
        if doc is None:
            raise EntityNotFoundError(f"Labour {labour_id} not found")
        return doc

    # Customers
    async def find_all_customers(self) -> list[Customer] | Outcome:
        if not self.available:
            logger.error("Customer listing failed: store unavailable")
            return CONNECTION_FAILURE
        return [customer_from_document(copy.deepcopy(d)) for d in self.customers.values()]

    async def find_customer_by_id(self, customer_id: str) -> Customer | Outcome:
        if not self.available:
            return CONNECTION_FAILURE
        try:
            doc = self._customer_doc(customer_id)
        except EntityNotFoundError:
            return NOT_FOUND
        return customer_from_document(copy.deepcopy(doc))

    async def find_customer_by_phone(self, phone: str) -> Customer | None:
        self._check_available()
        for doc in self.customers.values():
            if doc.get("phone") == phone:
                return customer_from_document(copy.deepcopy(doc))
        return None

    async def insert_customer(self, customer: Customer) -> Customer:
        self._check_available()
        customer.id = new_id()
        if customer.created_at is None:
            customer.created_at = utcnow()
        self.customers[customer.id] = customer_to_document(customer)
        return customer

    async def update_customer_fields(self, customer_id: str, changes: dict[str, Any]) -> None:
        self._check_available()
        doc = self._customer_doc(customer_id)
        for key, value in changes.items():
            if key in ("id", "transactions"):
                continue
            doc[key] = value

    async def delete_customer(self, customer_id: str) -> None:
        self._check_available()
        doc = self._customer_doc(customer_id)
        del self.customers[doc["id"]]

    # Transactions
    async def append_transaction(self, customer_id: str, transaction: Transaction) -> None:
        self._check_available()
        doc = self._customer_doc(customer_id)
        doc["transactions"].append(transaction_to_document(transaction))

    def _locate(
        self, entries: list[dict[str, Any]], entry_id: str, expected_version: int | None
    ) -> int:
        for idx, entry in enumerate(entries):
            if entry.get("id") == entry_id:
                if expected_version is not None and int(entry.get("version") or 1) != expected_version:
                    raise ConflictError(
                        f"Transaction {entry_id} is at version {entry.get('version')}, "
                        f"expected {expected_version}"
                    )
                return idx
        raise SubEntityNotFoundError(f"Transaction {entry_id} not found")

    async def replace_transaction(
        self,
        customer_id: str,
        transaction: Transaction,
        expected_version: int | None = None,
    ) -> Transaction:
        self._check_available()
        entries = self._customer_doc(customer_id)["transactions"]
        idx = self._locate(entries, transaction.id, expected_version)
        transaction.version = int(entries[idx].get("version") or 1) + 1
        entries[idx] = transaction_to_document(transaction)
        return transaction_from_document(copy.deepcopy(entries[idx]))

    async def remove_transaction(
        self,
        customer_id: str,
        transaction_id: str,
        expected_version: int | None = None,
    ) -> None:
        self._check_available()
        entries = self._customer_doc(customer_id)["transactions"]
        idx = self._locate(entries, transaction_id, expected_version)
        del entries[idx]

    # Labour
    async def find_all_labours(self) -> list[Labour] | Outcome:
        if not self.available:
            logger.error("Labour listing failed: store unavailable")
            return CONNECTION_FAILURE
        return [labour_from_document(copy.deepcopy(d)) for d in self.labours.values()]

    async def find_labour_by_id(self, labour_id: str) -> Labour | Outcome:
        if not self.available:
            return CONNECTION_FAILURE
        try:
            doc = self._labour_doc(labour_id)
        except EntityNotFoundError:
            return NOT_FOUND
        return labour_from_document(copy.deepcopy(doc))

    async def insert_labour(self, labour: Labour) -> Labour:
        self._check_available()
        labour.id = new_id()
        if labour.created_at is None:
            labour.created_at = utcnow()
        self.labours[labour.id] = labour_to_document(labour)
        return labour

    async def update_labour_fields(self, labour_id: str, changes: dict[str, Any]) -> None:
        self._check_available()
        doc = self._labour_doc(labour_id)
        for key, value in changes.items():
            if key in ("id", "payments"):
                continue
            doc[key] = value

    async def delete_labour(self, labour_id: str) -> None:
        self._check_available()
        doc = self._labour_doc(labour_id)
        del self.labours[doc["id"]]

    async def append_labour_payment(self, labour_id: str, payment: LabourPayment) -> None:
        self._check_available()
        self._labour_doc(labour_id)["payments"].append(payment_to_document(payment))

    async def remove_labour_payment(self, labour_id: str, payment_id: str) -> None:
        self._check_available()
        payments = self._labour_doc(labour_id)["payments"]
        for idx, entry in enumerate(payments):
            if entry.get("id") == payment_id:
                del payments[idx]
                return
        raise SubEntityNotFoundError(f"Payment {payment_id} not found")

    def summary(self) -> dict[str, int]:
        """Return summary counts of all stored entities."""
        return {
            "customers": len(self.customers),
            "transactions": sum(len(d["transactions"]) for d in self.customers.values()),
            "labours": len(self.labours),
            "labour_payments": sum(len(d["payments"]) for d in self.labours.values()),
        }
