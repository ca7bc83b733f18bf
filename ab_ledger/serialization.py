"""Document codec shared by store backends and JSON export.

Stored documents use camelCase keys, ISO-8601 dates and decimal strings for
amounts. Transactions and payments are embedded inside their parent document.
"""

import logging
from dataclasses import fields, is_dataclass
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, TypeVar

from ab_ledger.models import (
    Customer,
    Labour,
    LabourPayment,
    PaymentMode,
    Transaction,
    TransactionType,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


def serialize_value(value: Any) -> Any:
    """Serialize a value for document or JSON output."""
    if isinstance(value, Decimal):
        return str(value)
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, date):
        return value.isoformat()
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [serialize_value(v) for v in value]
    elif is_dataclass(value) and not isinstance(value, type):
        return {f.name: serialize_value(getattr(value, f.name)) for f in fields(value)}
    return value


def parse_amount(value: Any) -> Decimal:
    """Parse a stored or user-supplied amount.

    Raises
    ------
    ValueError
        If the value is not a finite number.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid amount: {value!r}")
    if isinstance(value, Decimal):
        amount = value
    else:
        text = str(value).strip().replace(",", "")
        try:
            amount = Decimal(text)
        except InvalidOperation as e:
            raise ValueError(f"Invalid amount: {value!r}") from e
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return amount


def parse_datetime(value: Any) -> datetime:
    """Parse an ISO-8601 date or datetime. Naive values are taken as UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        parsed = datetime.fromisoformat(str(value).strip())
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _coerce_enum(enum_cls: type[E], raw: Any, context: str) -> E | str:
    try:
        return enum_cls(raw)
    except ValueError:
        logger.warning("Unrecognized %s value %r in %s", enum_cls.__name__, raw, context)
        return str(raw)


def transaction_to_document(tx: Transaction) -> dict[str, Any]:
    return {
        "id": tx.id,
        "date": serialize_value(tx.date),
        "amount": serialize_value(tx.amount),
        "type": serialize_value(tx.type),
        "mode": serialize_value(tx.mode),
        "billNumber": tx.bill_number,
        "notes": tx.notes,
        "version": tx.version,
    }


def transaction_from_document(doc: dict[str, Any]) -> Transaction:
    context = f"transaction {doc.get('id')}"
    return Transaction(
        id=str(doc["id"]),
        date=parse_datetime(doc["date"]),
        amount=parse_amount(doc["amount"]),
        type=_coerce_enum(TransactionType, doc.get("type"), context),
        mode=_coerce_enum(PaymentMode, doc.get("mode") or PaymentMode.OTHER.value, context),
        bill_number=doc.get("billNumber"),
        notes=doc.get("notes"),
        version=int(doc.get("version") or 1),
    )


def customer_to_document(customer: Customer) -> dict[str, Any]:
    return {
        "id": customer.id,
        "name": customer.name,
        "phone": customer.phone,
        "address": customer.address,
        "billNumber": customer.bill_number,
        "amountPaid": serialize_value(customer.amount_paid),
        "amountDue": serialize_value(customer.amount_due),
        "transactions": [transaction_to_document(t) for t in customer.transactions],
        "createdAt": serialize_value(customer.created_at),
    }


def customer_from_document(doc: dict[str, Any]) -> Customer:
    amount_paid = doc.get("amountPaid")
    amount_due = doc.get("amountDue")
    created_at = doc.get("createdAt")
    return Customer(
        id=str(doc["id"]),
        name=doc.get("name") or "",
        phone=doc.get("phone") or "",
        address=doc.get("address") or "",
        bill_number=doc.get("billNumber"),
        amount_paid=parse_amount(amount_paid) if amount_paid is not None else None,
        amount_due=parse_amount(amount_due) if amount_due is not None else None,
        transactions=[transaction_from_document(t) for t in doc.get("transactions") or []],
        created_at=parse_datetime(created_at) if created_at else None,
    )


def payment_to_document(payment: LabourPayment) -> dict[str, Any]:
    return {
        "id": payment.id,
        "date": serialize_value(payment.date),
        "amount": serialize_value(payment.amount),
    }


def payment_from_document(doc: dict[str, Any]) -> LabourPayment:
    return LabourPayment(
        id=str(doc["id"]),
        date=parse_datetime(doc["date"]),
        amount=parse_amount(doc["amount"]),
    )


def labour_to_document(labour: Labour) -> dict[str, Any]:
    return {
        "id": labour.id,
        "name": labour.name,
        "phone": labour.phone,
        "payments": [payment_to_document(p) for p in labour.payments],
        "createdAt": serialize_value(labour.created_at),
    }


def labour_from_document(doc: dict[str, Any]) -> Labour:
    created_at = doc.get("createdAt")
    return Labour(
        id=str(doc["id"]),
        name=doc.get("name") or "",
        phone=doc.get("phone") or "",
        payments=[payment_from_document(p) for p in doc.get("payments") or []],
        created_at=parse_datetime(created_at) if created_at else None,
    )


def as_number(value: Decimal | None) -> int | float | str:
    """Render an amount as a plain JSON/CSV number (``None`` as 0).

    Fractions a float cannot hold exactly come back as the decimal string,
    which :func:`parse_amount` reads without loss.
    """
    if value is None:
        return 0
    if value == value.to_integral_value():
        return int(value)
    as_float = float(value)
    if Decimal(repr(as_float)) == value:
        return as_float
    return str(value)
