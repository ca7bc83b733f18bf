"""Customer, transaction and labour payloads for seeding a demo ledger.

Generators emit the same camelCase payloads the mutation service accepts, so
the generated data goes through validation like any other input.
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Iterator

from ab_ledger.generators.base import BaseGenerator
from ab_ledger.models import PaymentMode, TransactionType

PAYMENT_MODES = list(PaymentMode)
PAYMENT_MODE_WEIGHTS = [0.35, 0.45, 0.10, 0.10]

WORK_ITEMS = [
    "Modular kitchen",
    "Wardrobe",
    "False ceiling",
    "TV unit",
    "Wall panelling",
    "Shoe rack",
    "Study table",
    "Pooja unit",
]


def _rupees(low: int, high: int, step: int = 100) -> Decimal:
    return Decimal(random.randrange(low, high + 1, step))


class CustomerGenerator(BaseGenerator):
    """Generate customer and payment payloads for an interior-works ledger."""

    def generate(self) -> dict[str, Any]:
        """Generate a single ``add_customer`` payload.

        Returns
        -------
        dict[str, Any]
            Payload with an opening bill and an advance no larger than it.
        """
        amount_due = _rupees(20_000, 500_000, 500)
        amount_paid = _rupees(0, int(amount_due), 500)
        return {
            "name": self.fake.name(),
            "phone": self.mobile_number(),
            "address": self.fake.address().replace("\n", ", "),
            "billNumber": self.bill_number(),
            "amountDue": str(amount_due),
            "amountPaid": str(amount_paid),
        }

    def generate_batch(self, count: int) -> Iterator[dict[str, Any]]:
        """Generate multiple customer payloads.

        Parameters
        ----------
        count : int
            Number of customers to generate.

        Yields
        ------
        dict[str, Any]
            Customer payloads.
        """
        for _ in range(count):
            yield self.generate()

    def bill_number(self) -> str:
        return f"AB-{random.randint(1, 9999):04d}"

    def payments(
        self,
        customer_id: str,
        count: int,
        now: datetime | None = None,
    ) -> Iterator[dict[str, Any]]:
        """Yield ``add_payment`` payloads dated within the last year.

        Roughly one in four entries is an extra bill (DEBIT); the rest are
        customer payments (CREDIT).
        """
        now = now or datetime.now(timezone.utc)
        for _ in range(count):
            is_bill = random.random() < 0.25
            tx_type = TransactionType.DEBIT if is_bill else TransactionType.CREDIT
            payload = {
                "customerId": customer_id,
                "amount": str(_rupees(1_000, 100_000 if is_bill else 50_000)),
                "type": tx_type.value,
                "mode": random.choices(PAYMENT_MODES, weights=PAYMENT_MODE_WEIGHTS, k=1)[0].value,
                "date": (now - timedelta(days=random.randint(0, 365))).isoformat(),
                "notes": random.choice(WORK_ITEMS) if is_bill else None,
            }
            if is_bill:
                payload["billNumber"] = self.bill_number()
            yield payload


class LabourGenerator(BaseGenerator):
    """Generate labourer and wage payment payloads."""

    def generate(self) -> dict[str, Any]:
        return {"name": self.fake.name(), "phone": self.mobile_number()}

    def generate_batch(self, count: int) -> Iterator[dict[str, Any]]:
        for _ in range(count):
            yield self.generate()

    def payments(
        self,
        labour_id: str,
        count: int,
        now: datetime | None = None,
    ) -> Iterator[dict[str, Any]]:
        """Yield ``add_labour_payment`` payloads of daily or weekly wages."""
        now = now or datetime.now(timezone.utc)
        for _ in range(count):
            yield {
                "labourId": labour_id,
                "amount": str(_rupees(500, 7_000, 50)),
                "date": (now - timedelta(days=random.randint(0, 180))).isoformat(),
            }
