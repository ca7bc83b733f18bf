"""Read paths that attach computed totals to stored records."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from ab_ledger.ledger import LedgerSummary, calculate_summary, total_paid_to_labour
from ab_ledger.models import Customer, Labour
from ab_ledger.store.base import (
    CONNECTION_FAILURE,
    NOT_FOUND,
    UNAVAILABLE,
    LedgerGateway,
    Outcome,
)

logger = logging.getLogger(__name__)


@dataclass
class CustomerWithSummary:
    """A customer record paired with totals derived from its ledger."""

    customer: Customer
    summary: LedgerSummary

    @property
    def total_due(self) -> Decimal:
        return self.summary.total_due

    @property
    def total_paid(self) -> Decimal:
        return self.summary.total_paid

    @property
    def balance(self) -> Decimal:
        return self.summary.balance


@dataclass
class LabourWithTotal:
    labour: Labour
    total_paid: Decimal


def with_summary(customer: Customer) -> CustomerWithSummary:
    return CustomerWithSummary(customer=customer, summary=calculate_summary(customer.transactions))


class LedgerQueries:
    """Facade over the gateway's read paths.

    A store outage yields :data:`~ab_ledger.store.UNAVAILABLE` so callers can
    tell "no customers" apart from "cannot reach the store".
    """

    def __init__(self, gateway: LedgerGateway) -> None:
        self.gateway = gateway

    async def get_customers(self) -> list[CustomerWithSummary] | Outcome:
        customers = await self.gateway.find_all_customers()
        if customers is CONNECTION_FAILURE:
            logger.warning("Customer list unavailable: store unreachable")
            return UNAVAILABLE
        return [with_summary(c) for c in customers]

    async def get_customer_by_id(self, customer_id: str) -> CustomerWithSummary | Outcome:
        customer = await self.gateway.find_customer_by_id(customer_id)
        if customer is CONNECTION_FAILURE:
            logger.warning("Customer %s unavailable: store unreachable", customer_id)
            return UNAVAILABLE
        if customer is NOT_FOUND:
            return NOT_FOUND
        return with_summary(customer)

    async def get_labours(self) -> list[LabourWithTotal] | Outcome:
        labours = await self.gateway.find_all_labours()
        if labours is CONNECTION_FAILURE:
            logger.warning("Labour list unavailable: store unreachable")
            return UNAVAILABLE
        return [LabourWithTotal(labour=lab, total_paid=total_paid_to_labour(lab.payments)) for lab in labours]

    async def get_labour_by_id(self, labour_id: str) -> LabourWithTotal | Outcome:
        labour = await self.gateway.find_labour_by_id(labour_id)
        if labour is CONNECTION_FAILURE:
            return UNAVAILABLE
        if labour is NOT_FOUND:
            return NOT_FOUND
        return LabourWithTotal(labour=labour, total_paid=total_paid_to_labour(labour.payments))
