"""Input schemas for every ledger mutation.

Validation runs before any storage call. :func:`validate` turns pydantic's
error list into the ``field -> [messages]`` map carried by
:class:`~ab_ledger.exceptions.ValidationError`; keys use the camelCase names
callers send.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

from ab_ledger.exceptions import ValidationError
from ab_ledger.ledger import utcnow
from ab_ledger.models import PaymentMode, TransactionType

M = TypeVar("M", bound=BaseModel)

_NON_DIGIT = re.compile(r"\D")


def _min_length(value: str, length: int, label: str) -> str:
    if len(value) < length:
        raise PydanticCustomError("too_short", f"{label} must be at least {length} characters.")
    return value


def _phone_digits(value: str) -> str:
    if len(_NON_DIGIT.sub("", value)) < 10:
        raise PydanticCustomError("phone_too_short", "Phone number must be at least 10 digits.")
    return value


def _optional_text(value: str | None) -> str | None:
    return value or None


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class _Schema(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )


class CustomerFields(_Schema):
    """The four editable customer fields."""

    name: str
    phone: str
    address: str
    bill_number: str | None = Field(default=None, alias="billNumber")

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return _min_length(v, 2, "Name")

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        return _phone_digits(v)

    @field_validator("address")
    @classmethod
    def _address(cls, v: str) -> str:
        return _min_length(v, 5, "Address")

    @field_validator("bill_number")
    @classmethod
    def _bill_number(cls, v: str | None) -> str | None:
        return _optional_text(v)


class NewCustomer(CustomerFields):
    """Customer creation payload with optional seed amounts."""

    amount_paid: Decimal | None = Field(default=None, alias="amountPaid")
    amount_due: Decimal | None = Field(default=None, alias="amountDue")

    @field_validator("amount_paid", "amount_due")
    @classmethod
    def _non_negative(cls, v: Decimal | None) -> Decimal | None:
        if v is not None and v < 0:
            raise PydanticCustomError("negative_amount", "Amount cannot be negative.")
        return v


class TransactionInput(_Schema):
    """Mutable fields of a ledger transaction."""

    amount: Decimal
    type: TransactionType
    mode: PaymentMode
    date: datetime = Field(default_factory=utcnow)
    bill_number: str | None = Field(default=None, alias="billNumber")
    notes: str | None = None

    @field_validator("amount")
    @classmethod
    def _positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise PydanticCustomError("amount_not_positive", "Amount must be greater than 0.")
        return v

    @field_validator("date")
    @classmethod
    def _date(cls, v: datetime) -> datetime:
        return _aware(v)

    @field_validator("bill_number", "notes")
    @classmethod
    def _text(cls, v: str | None) -> str | None:
        return _optional_text(v)


class PaymentInput(TransactionInput):
    """A new transaction addressed to a customer."""

    customer_id: str = Field(alias="customerId")


class LabourFields(_Schema):
    name: str
    phone: str

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return _min_length(v, 2, "Name")

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        return _phone_digits(v)


class LabourPaymentInput(_Schema):
    labour_id: str = Field(alias="labourId")
    amount: Decimal
    date: datetime = Field(default_factory=utcnow)

    @field_validator("amount")
    @classmethod
    def _positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise PydanticCustomError("amount_not_positive", "Amount must be greater than 0.")
        return v

    @field_validator("date")
    @classmethod
    def _date(cls, v: datetime) -> datetime:
        return _aware(v)


def validate(schema: type[M], data: Mapping[str, Any] | Any) -> M:
    """Validate ``data`` against ``schema``.

    Raises
    ------
    ValidationError
        With one entry per offending field; ``_form`` when the payload itself
        is unusable.
    """
    try:
        return schema.model_validate(data)
    except pydantic.ValidationError as e:
        errors: dict[str, list[str]] = {}
        for err in e.errors():
            field = str(err["loc"][0]) if err["loc"] else "_form"
            errors.setdefault(field, []).append(err["msg"])
        raise ValidationError(errors) from e
