"""Action entry points that never raise.

Each action wraps a service call and reports either success (with the
operation's return value) or an ``errors`` map. Field errors keep their field
names; everything else lands under ``_form``.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Mapping
from dataclasses import dataclass, field
from typing import Any

from ab_ledger.exceptions import ConflictError, EntityNotFoundError, ValidationError
from ab_ledger.service import LedgerService

logger = logging.getLogger(__name__)

FORM_ERROR_KEY = "_form"
UNEXPECTED_ERROR = "An unexpected error occurred."


@dataclass
class ActionResult:
    success: bool
    errors: dict[str, list[str]] = field(default_factory=dict)
    data: Any = None


async def perform(operation: Awaitable[Any], description: str) -> ActionResult:
    """Await ``operation`` and translate its outcome into an :class:`ActionResult`."""
    try:
        data = await operation
    except ValidationError as e:
        return ActionResult(success=False, errors=e.errors)
    except (EntityNotFoundError, ConflictError) as e:
        logger.info("%s rejected: %s", description, e)
        return ActionResult(success=False, errors={FORM_ERROR_KEY: [str(e)]})
    except Exception:
        logger.exception("%s failed", description)
        return ActionResult(success=False, errors={FORM_ERROR_KEY: [UNEXPECTED_ERROR]})
    return ActionResult(success=True, data=data)


class LedgerActions:
    """Caller-facing wrappers around :class:`LedgerService`."""

    def __init__(self, service: LedgerService) -> None:
        self.service = service

    async def add_customer(self, data: Mapping[str, Any]) -> ActionResult:
        return await perform(self.service.add_customer(data), "add_customer")

    async def update_customer(self, customer_id: str, data: Mapping[str, Any]) -> ActionResult:
        return await perform(self.service.update_customer(customer_id, data), "update_customer")

    async def delete_customer(self, customer_id: str) -> ActionResult:
        return await perform(self.service.delete_customer(customer_id), "delete_customer")

    async def add_payment(self, data: Mapping[str, Any]) -> ActionResult:
        return await perform(self.service.add_payment(data), "add_payment")

    async def update_transaction(
        self,
        customer_id: str,
        transaction_id: str,
        data: Mapping[str, Any],
        expected_version: int | None = None,
    ) -> ActionResult:
        return await perform(
            self.service.update_transaction(customer_id, transaction_id, data, expected_version),
            "update_transaction",
        )

    async def delete_transaction(
        self,
        customer_id: str,
        transaction_id: str,
        expected_version: int | None = None,
    ) -> ActionResult:
        return await perform(
            self.service.delete_transaction(customer_id, transaction_id, expected_version),
            "delete_transaction",
        )

    async def add_labour(self, data: Mapping[str, Any]) -> ActionResult:
        return await perform(self.service.add_labour(data), "add_labour")

    async def update_labour(self, labour_id: str, data: Mapping[str, Any]) -> ActionResult:
        return await perform(self.service.update_labour(labour_id, data), "update_labour")

    async def delete_labour(self, labour_id: str) -> ActionResult:
        return await perform(self.service.delete_labour(labour_id), "delete_labour")

    async def add_labour_payment(self, data: Mapping[str, Any]) -> ActionResult:
        return await perform(self.service.add_labour_payment(data), "add_labour_payment")

    async def delete_labour_payment(self, labour_id: str, payment_id: str) -> ActionResult:
        return await perform(
            self.service.delete_labour_payment(labour_id, payment_id), "delete_labour_payment"
        )
