"""CSV and JSON export of customers with their computed summaries."""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Iterable
from decimal import Decimal
from typing import Any

from ab_ledger.queries import CustomerWithSummary, LedgerQueries
from ab_ledger.serialization import as_number, serialize_value
from ab_ledger.store.base import Outcome
from ab_ledger.transfer.columns import EXPORT_HEADER


def _csv_number(value: Decimal | None) -> int | float | Decimal:
    # The csv writer leaves Decimal cells unquoted, like ints and floats.
    number = as_number(value)
    return Decimal(number) if isinstance(number, str) else number


def customers_to_csv(customers: Iterable[CustomerWithSummary]) -> str:
    """One row per customer; text cells quoted, numeric cells bare.

    The trailing Total Due, Total Paid and Balance columns come from the full
    ledger, not from the seed amounts.
    """
    buffer = io.StringIO()
    buffer.write(",".join(EXPORT_HEADER) + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    for entry in customers:
        customer = entry.customer
        writer.writerow(
            [
                customer.name,
                customer.phone,
                customer.address,
                customer.bill_number or "",
                _csv_number(customer.amount_paid),
                _csv_number(customer.amount_due),
                _csv_number(entry.total_due),
                _csv_number(entry.total_paid),
                _csv_number(entry.balance),
            ]
        )
    return buffer.getvalue()


def customer_to_export(entry: CustomerWithSummary) -> dict[str, Any]:
    customer = entry.customer
    return {
        "id": customer.id,
        "name": customer.name,
        "phone": customer.phone,
        "address": customer.address,
        "billNumber": customer.bill_number,
        "amountPaid": as_number(customer.amount_paid),
        "amountDue": as_number(customer.amount_due),
        "createdAt": serialize_value(customer.created_at),
        "totalDue": as_number(entry.total_due),
        "totalPaid": as_number(entry.total_paid),
        "balance": as_number(entry.balance),
        "transactions": [
            {
                "id": t.id,
                "date": serialize_value(t.date),
                "amount": as_number(t.amount),
                "type": serialize_value(t.type),
                "mode": serialize_value(t.mode),
                "billNumber": t.bill_number,
                "notes": t.notes,
                "version": t.version,
            }
            for t in customer.transactions
        ],
    }


def customers_to_json(customers: Iterable[CustomerWithSummary], pretty: bool = True) -> str:
    data = [customer_to_export(c) for c in customers]
    if pretty:
        return json.dumps(data, indent=2, ensure_ascii=False)
    return json.dumps(data, ensure_ascii=False)


async def export_customers_csv(queries: LedgerQueries) -> str | Outcome:
    """Export every customer, or the unavailable sentinel on a store outage."""
    customers = await queries.get_customers()
    if isinstance(customers, Outcome):
        return customers
    return customers_to_csv(customers)


async def export_customers_json(queries: LedgerQueries, pretty: bool = True) -> str | Outcome:
    customers = await queries.get_customers()
    if isinstance(customers, Outcome):
        return customers
    return customers_to_json(customers, pretty=pretty)
