"""Best-effort CSV and JSON import of customers.

A bad row never aborts the batch: it is reported in
:attr:`ImportResult.errors` and the remaining rows carry on. Only an
unreadable payload (bad JSON, missing/unknown CSV headers) raises
:class:`~ab_ledger.exceptions.ImportFormatError`, and it does so before any
row is written.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import Any

from ab_ledger.exceptions import ImportFormatError, LedgerError
from ab_ledger.ledger import SeedSource, new_id, normalize_phone, synthesize_seed_transactions
from ab_ledger.models import Customer, PaymentMode, Transaction, TransactionType
from ab_ledger.serialization import parse_amount, parse_datetime
from ab_ledger.store.base import LedgerGateway
from ab_ledger.transfer.columns import resolve_header

logger = logging.getLogger(__name__)

# Counted before the country code is added; an empty phone is allowed.
MIN_PHONE_DIGITS = 10


@dataclass
class ImportResult:
    """Outcome report for a whole batch."""

    success: int = 0
    duplicates: int = 0
    errors: list[str] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


class RowError(ValueError):
    """A single record cannot be imported."""


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _seed_amount(record: dict[str, Any], key: str, label: str) -> Decimal | None:
    raw = record.get(key)
    if raw is None or _text(raw) == "":
        return None
    try:
        amount = parse_amount(raw)
    except ValueError as e:
        raise RowError(f"Invalid {label}: {raw!r}") from e
    if amount < 0:
        raise RowError(f"{label} cannot be negative")
    return amount


def _version(raw: Any) -> int:
    if raw is None or raw == "":
        return 1
    if isinstance(raw, bool) or (isinstance(raw, float) and not raw.is_integer()):
        raise ValueError(f"Invalid version: {raw!r}")
    version = int(raw)
    if version < 1:
        raise ValueError(f"Invalid version: {raw!r}")
    return version


def _supplied_transaction(doc: Any, position: int, seen_ids: set[str]) -> Transaction:
    if not isinstance(doc, dict):
        raise RowError(f"Transaction {position} is not an object")
    try:
        amount = parse_amount(doc.get("amount"))
        tx_type = TransactionType(doc.get("type"))
        mode = PaymentMode(doc.get("mode") or PaymentMode.OTHER.value)
        date = parse_datetime(doc["date"])
        version = _version(doc.get("version"))
    except (KeyError, TypeError, ValueError) as e:
        raise RowError(f"Transaction {position} is invalid") from e
    if amount <= 0:
        raise RowError(f"Transaction {position} amount must be greater than 0")

    tx_id = _text(doc.get("id"))
    if not tx_id or tx_id in seen_ids:
        tx_id = new_id()
    seen_ids.add(tx_id)

    return Transaction(
        id=tx_id,
        date=date,
        amount=amount,
        type=tx_type,
        mode=mode,
        bill_number=_text(doc.get("billNumber")) or None,
        notes=_text(doc.get("notes")) or None,
        version=version,
    )


class CustomerImporter:
    """Creates customers from flat CSV rows or JSON objects.

    Parameters
    ----------
    gateway : LedgerGateway
        Persistence backend; also used for duplicate detection by phone.
    phone_prefix : str
        Country code prepended to phone numbers lacking it.
    """

    def __init__(self, gateway: LedgerGateway, phone_prefix: str = "+91") -> None:
        self.gateway = gateway
        self.phone_prefix = phone_prefix

    async def import_csv(self, text: str) -> ImportResult:
        """Import a CSV document whose first row is the header.

        Row labels count the header as row 1, so the first data row is
        ``Row 2``.
        """
        rows = list(csv.reader(io.StringIO(text.lstrip("\ufeff"))))
        if not rows:
            raise ImportFormatError("CSV input is empty")
        positions = resolve_header(rows[0])

        result = ImportResult()
        for line_number, row in enumerate(rows[1:], start=2):
            if not any(cell.strip() for cell in row):
                continue
            record = {name: row[idx] if idx < len(row) else "" for idx, name in positions.items()}
            await self._import_record(record, f"Row {line_number}", result)

        logger.info(
            "CSV import finished: %d imported, %d duplicates, %d errors",
            result.success,
            result.duplicates,
            len(result.errors),
        )
        return result

    async def import_json(self, payload: str | list[Any]) -> ImportResult:
        """Import a JSON array of customer objects.

        Objects carrying a non-empty ``transactions`` array keep those
        transactions as-is; seed amounts are then not synthesized.
        """
        if isinstance(payload, str):
            try:
                payload = json.loads(payload)
            except json.JSONDecodeError as e:
                raise ImportFormatError(f"Invalid JSON: {e.msg}") from e
        if not isinstance(payload, list):
            raise ImportFormatError("JSON input must be an array of customer objects")

        result = ImportResult()
        for position, item in enumerate(payload, start=1):
            label = f"Row {position}"
            if not isinstance(item, dict):
                result.errors.append(f"{label}: Expected an object")
                continue
            await self._import_record(item, label, result)

        logger.info(
            "JSON import finished: %d imported, %d duplicates, %d errors",
            result.success,
            result.duplicates,
            len(result.errors),
        )
        return result

    async def _import_record(self, record: dict[str, Any], label: str, result: ImportResult) -> None:
        name = _text(record.get("name"))
        if not name:
            result.errors.append(f"{label}: Name is required")
            return

        try:
            customer = self._build_customer(record, name)
        except RowError as e:
            result.errors.append(f"{label}: {e}")
            return

        try:
            if customer.phone and await self.gateway.find_customer_by_phone(customer.phone):
                result.duplicates += 1
                logger.debug("%s skipped: phone %s already exists", label, customer.phone)
                return
            await self.gateway.insert_customer(customer)
        except LedgerError as e:
            logger.error("%s could not be stored: %s", label, e)
            result.errors.append(f"{label}: {e}")
            return

        result.success += 1

    def _build_customer(self, record: dict[str, Any], name: str) -> Customer:
        amount_paid = _seed_amount(record, "amountPaid", "Amount Paid")
        amount_due = _seed_amount(record, "amountDue", "Amount Due")
        bill_number = _text(record.get("billNumber")) or None
        phone = _text(record.get("phone"))
        if phone and sum(ch.isdigit() for ch in phone) < MIN_PHONE_DIGITS:
            raise RowError(f"Phone number must be at least {MIN_PHONE_DIGITS} digits")

        supplied = record.get("transactions")
        if isinstance(supplied, list) and supplied:
            seen: set[str] = set()
            transactions = [
                _supplied_transaction(doc, position, seen)
                for position, doc in enumerate(supplied, start=1)
            ]
        else:
            transactions = synthesize_seed_transactions(
                amount_due, amount_paid, bill_number, source=SeedSource.IMPORT
            )

        return Customer(
            id=None,
            name=name,
            phone=normalize_phone(phone, self.phone_prefix),
            address=_text(record.get("address")),
            bill_number=bill_number,
            amount_paid=amount_paid,
            amount_due=amount_due,
            transactions=transactions,
        )
