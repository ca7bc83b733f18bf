"""Tests for the document codec."""

import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from ab_ledger.models import Customer, Labour, LabourPayment, PaymentMode, TransactionType
from ab_ledger.serialization import (
    as_number,
    customer_from_document,
    customer_to_document,
    labour_from_document,
    labour_to_document,
    parse_amount,
    parse_datetime,
    serialize_value,
    transaction_from_document,
    transaction_to_document,
)


class TestSerializeValue:
    """Tests for serialize_value."""

    def test_decimal(self) -> None:
        assert serialize_value(Decimal("123.45")) == "123.45"

    def test_enum(self) -> None:
        assert serialize_value(TransactionType.DEBIT) == "DEBIT"

    def test_datetime(self) -> None:
        dt = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
        assert serialize_value(dt) == "2024-01-15T10:30:00+00:00"

    def test_date(self) -> None:
        assert serialize_value(date(2024, 1, 15)) == "2024-01-15"

    def test_nested(self) -> None:
        value = {"amounts": [Decimal("1"), Decimal("2.5")], "mode": PaymentMode.UPI}
        assert serialize_value(value) == {"amounts": ["1", "2.5"], "mode": "UPI"}

    def test_dataclass(self) -> None:
        @dataclass
        class Point:
            x: Decimal
            y: int

        assert serialize_value(Point(x=Decimal("1.5"), y=2)) == {"x": "1.5", "y": 2}

    def test_passthrough(self) -> None:
        assert serialize_value("text") == "text"
        assert serialize_value(None) is None


class TestParseAmount:
    """Tests for parse_amount."""

    def test_string(self) -> None:
        assert parse_amount("1500.75") == Decimal("1500.75")

    def test_thousands_separators(self) -> None:
        assert parse_amount("1,00,000") == Decimal("100000")

    def test_numbers(self) -> None:
        assert parse_amount(250) == Decimal("250")
        assert parse_amount(Decimal("9.99")) == Decimal("9.99")

    @pytest.mark.parametrize("value", ["abc", "", "NaN", "Infinity", True])
    def test_invalid(self, value) -> None:
        with pytest.raises(ValueError):
            parse_amount(value)


class TestParseDatetime:
    """Tests for parse_datetime."""

    def test_naive_becomes_utc(self) -> None:
        parsed = parse_datetime("2024-07-01T10:00:00")
        assert parsed.tzinfo == timezone.utc

    def test_keeps_offset(self) -> None:
        parsed = parse_datetime("2024-07-01T10:00:00+05:30")
        assert parsed.utcoffset().total_seconds() == 5.5 * 3600

    def test_date_only(self) -> None:
        assert parse_datetime("2024-07-01") == datetime(2024, 7, 1, tzinfo=timezone.utc)
        assert parse_datetime(date(2024, 7, 1)) == datetime(2024, 7, 1, tzinfo=timezone.utc)

    def test_invalid(self) -> None:
        with pytest.raises(ValueError):
            parse_datetime("yesterday")


class TestTransactionDocuments:
    """Tests for transaction documents."""

    def test_camel_case_keys(self, make_transaction) -> None:
        tx = make_transaction("t1", "500", TransactionType.CREDIT, mode=PaymentMode.UPI)
        tx.bill_number = "AB-1"

        doc = transaction_to_document(tx)

        assert doc == {
            "id": "t1",
            "date": "2024-07-01T00:00:00+00:00",
            "amount": "500",
            "type": "CREDIT",
            "mode": "UPI",
            "billNumber": "AB-1",
            "notes": None,
            "version": 1,
        }
        assert transaction_from_document(doc) == tx

    def test_unknown_type_kept_raw(self, caplog) -> None:
        """An unrecognized stored type is kept as a plain string and logged."""
        doc = {"id": "t1", "date": "2024-07-01", "amount": "10", "type": "REFUND", "mode": "CASH"}

        tx = transaction_from_document(doc)

        assert tx.type == "REFUND"
        assert not isinstance(tx.type, TransactionType)
        assert "REFUND" in caplog.text

    def test_defaults_for_missing_fields(self) -> None:
        tx = transaction_from_document(
            {"id": "t1", "date": "2024-07-01", "amount": 10, "type": "DEBIT"}
        )

        assert tx.mode == PaymentMode.OTHER
        assert tx.version == 1


class TestCustomerDocuments:
    """Tests for customer documents."""

    def test_round_trip(self, make_customer, make_transaction) -> None:
        customer = make_customer(
            [make_transaction("t1", "100", TransactionType.DEBIT)],
            amount_due=Decimal("100"),
            created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )

        doc = customer_to_document(customer)

        assert doc["amountDue"] == "100"
        assert doc["amountPaid"] is None
        assert doc["transactions"][0]["id"] == "t1"
        assert customer_from_document(doc) == customer

    def test_missing_transactions(self) -> None:
        customer = customer_from_document(
            {"id": "c1", "name": "A", "phone": "1", "address": "x", "transactions": None}
        )

        assert customer.transactions == []
        assert customer.created_at is None

    def test_id_is_string(self) -> None:
        key = uuid.uuid4()
        customer = customer_from_document({"id": key, "name": "A", "phone": "", "address": ""})
        assert customer.id == str(key)


class TestLabourDocuments:
    def test_round_trip(self) -> None:
        labour = Labour(
            id="l1",
            name="Suresh",
            phone="9000000000",
            payments=[
                LabourPayment(
                    id="p1", date=datetime(2024, 2, 1, tzinfo=timezone.utc), amount=Decimal("800")
                )
            ],
        )

        doc = labour_to_document(labour)

        assert doc["payments"] == [
            {"id": "p1", "date": "2024-02-01T00:00:00+00:00", "amount": "800"}
        ]
        assert labour_from_document(doc) == labour


class TestAsNumber:
    def test_integral(self) -> None:
        assert as_number(Decimal("15000.00")) == 15000
        assert isinstance(as_number(Decimal("15000.00")), int)

    def test_fractional(self) -> None:
        assert as_number(Decimal("12.5")) == 12.5

    def test_none(self) -> None:
        assert as_number(None) == 0

    def test_fraction_beyond_float_precision(self) -> None:
        amount = Decimal("12345678901234567.89")

        assert as_number(amount) == "12345678901234567.89"
        assert parse_amount(as_number(amount)) == amount

    def test_large_integral_exact(self) -> None:
        assert as_number(Decimal("123456789012345678901")) == 123456789012345678901
