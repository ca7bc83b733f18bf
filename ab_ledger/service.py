"""Validated create/update/delete operations for the ledger."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ab_ledger.ledger import SeedSource, new_id, normalize_phone, synthesize_seed_transactions
from ab_ledger.models import Customer, Labour, LabourPayment, Transaction
from ab_ledger.schemas import (
    CustomerFields,
    LabourFields,
    LabourPaymentInput,
    NewCustomer,
    PaymentInput,
    TransactionInput,
    validate,
)
from ab_ledger.store.base import LedgerGateway

logger = logging.getLogger(__name__)


class LedgerService:
    """Mutation entry points for customers, transactions and labour.

    Every method validates its payload first and raises
    :class:`~ab_ledger.exceptions.ValidationError` without touching the store
    when it is invalid. Missing parents raise
    :class:`~ab_ledger.exceptions.EntityNotFoundError`; a missing transaction
    or payment under an existing parent raises
    :class:`~ab_ledger.exceptions.SubEntityNotFoundError`.

    Parameters
    ----------
    gateway : LedgerGateway
        Persistence backend.
    phone_prefix : str
        Country code prepended to customer phone numbers.
    """

    def __init__(self, gateway: LedgerGateway, phone_prefix: str = "+91") -> None:
        self.gateway = gateway
        self.phone_prefix = phone_prefix

    # Customers
    async def add_customer(self, data: Mapping[str, Any]) -> Customer:
        """Create a customer, seeding its ledger from ``amountDue``/``amountPaid``."""
        fields = validate(NewCustomer, data)
        customer = Customer(
            id=None,
            name=fields.name,
            phone=normalize_phone(fields.phone, self.phone_prefix),
            address=fields.address,
            bill_number=fields.bill_number,
            amount_paid=fields.amount_paid,
            amount_due=fields.amount_due,
            transactions=synthesize_seed_transactions(
                fields.amount_due,
                fields.amount_paid,
                fields.bill_number,
                source=SeedSource.CREATION,
            ),
        )
        customer = await self.gateway.insert_customer(customer)
        logger.info(
            "Added customer %s with %d seed transaction(s)",
            customer.id,
            len(customer.transactions),
            extra={"customer_id": customer.id},
        )
        return customer

    async def update_customer(self, customer_id: str, data: Mapping[str, Any]) -> None:
        """Replace name, phone, address and bill number; the ledger is untouched."""
        fields = validate(CustomerFields, data)
        await self.gateway.update_customer_fields(
            customer_id,
            {
                "name": fields.name,
                "phone": normalize_phone(fields.phone, self.phone_prefix),
                "address": fields.address,
                "billNumber": fields.bill_number,
            },
        )
        logger.info("Updated customer %s", customer_id, extra={"customer_id": customer_id})

    async def delete_customer(self, customer_id: str) -> None:
        await self.gateway.delete_customer(customer_id)
        logger.info("Deleted customer %s", customer_id, extra={"customer_id": customer_id})

    # Transactions
    async def add_payment(self, data: Mapping[str, Any]) -> Transaction:
        """Append a new transaction to the customer named by ``customerId``."""
        payment = validate(PaymentInput, data)
        transaction = Transaction(
            id=new_id(),
            date=payment.date,
            amount=payment.amount,
            type=payment.type,
            mode=payment.mode,
            bill_number=payment.bill_number,
            notes=payment.notes,
        )
        await self.gateway.append_transaction(payment.customer_id, transaction)
        logger.info(
            "Recorded %s of %s for customer %s",
            transaction.type.value,
            transaction.amount,
            payment.customer_id,
            extra={"customer_id": payment.customer_id, "transaction_id": transaction.id},
        )
        return transaction

    async def update_transaction(
        self,
        customer_id: str,
        transaction_id: str,
        data: Mapping[str, Any],
        expected_version: int | None = None,
    ) -> Transaction:
        """Replace every mutable field of one transaction.

        With ``expected_version`` set, the update is refused with
        :class:`~ab_ledger.exceptions.ConflictError` if the stored entry has
        moved on; without it the last write wins.
        """
        fields = validate(TransactionInput, data)
        transaction = Transaction(
            id=transaction_id,
            date=fields.date,
            amount=fields.amount,
            type=fields.type,
            mode=fields.mode,
            bill_number=fields.bill_number,
            notes=fields.notes,
        )
        updated = await self.gateway.replace_transaction(customer_id, transaction, expected_version)
        logger.info(
            "Updated transaction %s of customer %s",
            transaction_id,
            customer_id,
            extra={"customer_id": customer_id, "transaction_id": transaction_id},
        )
        return updated

    async def delete_transaction(
        self,
        customer_id: str,
        transaction_id: str,
        expected_version: int | None = None,
    ) -> None:
        await self.gateway.remove_transaction(customer_id, transaction_id, expected_version)
        logger.info(
            "Deleted transaction %s of customer %s",
            transaction_id,
            customer_id,
            extra={"customer_id": customer_id, "transaction_id": transaction_id},
        )

    # Labour
    async def add_labour(self, data: Mapping[str, Any]) -> Labour:
        fields = validate(LabourFields, data)
        labour = await self.gateway.insert_labour(Labour(id=None, name=fields.name, phone=fields.phone))
        logger.info("Added labour %s", labour.id, extra={"labour_id": labour.id})
        return labour

    async def update_labour(self, labour_id: str, data: Mapping[str, Any]) -> None:
        fields = validate(LabourFields, data)
        await self.gateway.update_labour_fields(labour_id, {"name": fields.name, "phone": fields.phone})
        logger.info("Updated labour %s", labour_id, extra={"labour_id": labour_id})

    async def delete_labour(self, labour_id: str) -> None:
        await self.gateway.delete_labour(labour_id)
        logger.info("Deleted labour %s", labour_id, extra={"labour_id": labour_id})

    async def add_labour_payment(self, data: Mapping[str, Any]) -> LabourPayment:
        fields = validate(LabourPaymentInput, data)
        payment = LabourPayment(id=new_id(), date=fields.date, amount=fields.amount)
        await self.gateway.append_labour_payment(fields.labour_id, payment)
        logger.info(
            "Recorded payment of %s to labour %s",
            payment.amount,
            fields.labour_id,
            extra={"labour_id": fields.labour_id, "payment_id": payment.id},
        )
        return payment

    async def delete_labour_payment(self, labour_id: str, payment_id: str) -> None:
        await self.gateway.remove_labour_payment(labour_id, payment_id)
        logger.info(
            "Deleted payment %s of labour %s",
            payment_id,
            labour_id,
            extra={"labour_id": labour_id, "payment_id": payment_id},
        )
