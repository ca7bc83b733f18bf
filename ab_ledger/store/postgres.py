"""PostgreSQL document backend.

Each customer and labourer is one row; their transactions and payments live
in a JSONB array on that row. Every mutation is a single UPDATE, so appends
from concurrent requests never lose each other.
"""

from __future__ import annotations

import logging
from typing import Any

import psycopg
from psycopg import sql
from psycopg.types.json import Jsonb

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
    labour_from_document,
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
from ab_ledger.store.client import StoreClient

logger = logging.getLogger(__name__)

CUSTOMER_COLUMNS = {
    "name": "name",
    "phone": "phone",
    "address": "address",
    "billNumber": "bill_number",
}

LABOUR_COLUMNS = {
    "name": "name",
    "phone": "phone",
}

SELECT_CUSTOMERS = """
    SELECT id, name, phone, address, bill_number, amount_paid, amount_due,
           transactions, created_at
    FROM customers
"""

SELECT_LABOURS = "SELECT id, name, phone, payments, created_at FROM labours"

# Matches the entry with the given id, optionally pinned to a version.
_ENTRY_MATCH = """
    EXISTS (
        SELECT 1 FROM jsonb_array_elements({column}) AS e(elem)
        WHERE elem->>'id' = %(entry_id)s
          AND (%(version)s::int IS NULL
               OR COALESCE((elem->>'version')::int, 1) = %(version)s::int)
    )
"""

REPLACE_TRANSACTION = f"""
    UPDATE customers
    SET transactions = (
        SELECT jsonb_agg(
            CASE WHEN elem->>'id' = %(entry_id)s
                 THEN %(doc)s::jsonb || jsonb_build_object(
                     'version', COALESCE((elem->>'version')::int, 1) + 1)
                 ELSE elem
            END
            ORDER BY ord)
        FROM jsonb_array_elements(transactions) WITH ORDINALITY AS t(elem, ord)
    )
    WHERE id = %(parent_id)s AND {_ENTRY_MATCH.format(column="transactions")}
    RETURNING (
        SELECT elem FROM jsonb_array_elements(transactions) AS r(elem)
        WHERE elem->>'id' = %(entry_id)s
    ) AS entry
"""

REMOVE_ENTRY = """
    UPDATE {table}
    SET {column} = COALESCE((
        SELECT jsonb_agg(elem ORDER BY ord)
        FROM jsonb_array_elements({column}) WITH ORDINALITY AS t(elem, ord)
        WHERE elem->>'id' <> %(entry_id)s
    ), '[]'::jsonb)
    WHERE id = %(parent_id)s AND {match}
"""

ENTRY_LOOKUP = """
    SELECT EXISTS (
        SELECT 1 FROM jsonb_array_elements({column}) AS e(elem)
        WHERE elem->>'id' = %(entry_id)s
    ) AS has_entry
    FROM {table} WHERE id = %(parent_id)s
"""


def _customer_row_to_document(row: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": str(row["id"]),
        "name": row["name"],
        "phone": row["phone"],
        "address": row["address"],
        "billNumber": row["bill_number"],
        "amountPaid": row["amount_paid"],
        "amountDue": row["amount_due"],
        "transactions": row["transactions"],
        "createdAt": row["created_at"],
    }


def _labour_row_to_document(row: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": str(row["id"]),
        "name": row["name"],
        "phone": row["phone"],
        "payments": row["payments"],
        "createdAt": row["created_at"],
    }


class PostgresGateway(LedgerGateway):
    """Gateway over PostgreSQL rows carrying embedded JSONB ledgers.

    Parameters
    ----------
    client : StoreClient
        Shared, lazily connected client. Injected so tests can substitute it.
    """

    def __init__(self, client: StoreClient) -> None:
        self.client = client

    async def _cursor(self, query: Any, params: Any = None) -> psycopg.AsyncCursor:
        conn = await self.client.connect()
        try:
            return await conn.execute(query, params)
        except psycopg.OperationalError as e:
            logger.error("Store operation failed: %s", e)
            raise StorageUnavailableError("Document store is unreachable") from e

    async def _fetchall(self, query: Any, params: Any = None) -> list[dict[str, Any]]:
        cur = await self._cursor(query, params)
        return await cur.fetchall()

    async def _fetchone(self, query: Any, params: Any = None) -> dict[str, Any] | None:
        cur = await self._cursor(query, params)
        return await cur.fetchone()

    async def _rowcount(self, query: Any, params: Any = None) -> int:
        cur = await self._cursor(query, params)
        return cur.rowcount

    # Customers
    async def find_all_customers(self) -> list[Customer] | Outcome:
        try:
            rows = await self._fetchall(SELECT_CUSTOMERS + " ORDER BY created_at, id")
        except StorageUnavailableError:
            return CONNECTION_FAILURE
        return [customer_from_document(_customer_row_to_document(r)) for r in rows]

    async def find_customer_by_id(self, customer_id: str) -> Customer | Outcome:
        key = parse_identifier(customer_id)
        if key is None:
            return NOT_FOUND
        try:
            row = await self._fetchone(SELECT_CUSTOMERS + " WHERE id = %s", (key,))
        except StorageUnavailableError:
            return CONNECTION_FAILURE
        if row is None:
            return NOT_FOUND
        return customer_from_document(_customer_row_to_document(row))

    async def find_customer_by_phone(self, phone: str) -> Customer | None:
        row = await self._fetchone(SELECT_CUSTOMERS + " WHERE phone = %s LIMIT 1", (phone,))
        return customer_from_document(_customer_row_to_document(row)) if row else None

    async def insert_customer(self, customer: Customer) -> Customer:
        customer.id = new_id()
        if customer.created_at is None:
            customer.created_at = utcnow()
        await self._cursor(
            """
            INSERT INTO customers (id, name, phone, address, bill_number,
                                   amount_paid, amount_due, transactions, created_at)
            VALUES (%(id)s, %(name)s, %(phone)s, %(address)s, %(bill_number)s,
                    %(amount_paid)s, %(amount_due)s, %(transactions)s, %(created_at)s)
            """,
            {
                "id": parse_identifier(customer.id),
                "name": customer.name,
                "phone": customer.phone,
                "address": customer.address,
                "bill_number": customer.bill_number,
                "amount_paid": customer.amount_paid,
                "amount_due": customer.amount_due,
                "transactions": Jsonb([transaction_to_document(t) for t in customer.transactions]),
                "created_at": customer.created_at,
            },
        )
        logger.debug("Inserted customer %s", customer.id)
        return customer

    async def update_customer_fields(self, customer_id: str, changes: dict[str, Any]) -> None:
        await self._update_columns("customers", CUSTOMER_COLUMNS, customer_id, changes, "Customer")

    async def delete_customer(self, customer_id: str) -> None:
        await self._delete_row("customers", customer_id, "Customer")

    # Transactions
    async def append_transaction(self, customer_id: str, transaction: Transaction) -> None:
        await self._append_entry(
            "customers", "transactions", customer_id, transaction_to_document(transaction), "Customer"
        )

    async def replace_transaction(
        self,
        customer_id: str,
        transaction: Transaction,
        expected_version: int | None = None,
    ) -> Transaction:
        key = parse_identifier(customer_id)
        if key is None:
            raise EntityNotFoundError(f"Customer {customer_id} not found")
        row = await self._fetchone(
            REPLACE_TRANSACTION,
            {
                "parent_id": key,
                "entry_id": transaction.id,
                "version": expected_version,
                "doc": Jsonb(transaction_to_document(transaction)),
            },
        )
        if row is None:
            await self._explain_miss("customers", "transactions", key, transaction.id, "Transaction")
        return transaction_from_document(row["entry"])

    async def remove_transaction(
        self,
        customer_id: str,
        transaction_id: str,
        expected_version: int | None = None,
    ) -> None:
        await self._remove_entry(
            "customers", "transactions", customer_id, transaction_id, expected_version, "Transaction"
        )

    # Labour
    async def find_all_labours(self) -> list[Labour] | Outcome:
        try:
            rows = await self._fetchall(SELECT_LABOURS + " ORDER BY created_at, id")
        except StorageUnavailableError:
            return CONNECTION_FAILURE
        return [labour_from_document(_labour_row_to_document(r)) for r in rows]

    async def find_labour_by_id(self, labour_id: str) -> Labour | Outcome:
        key = parse_identifier(labour_id)
        if key is None:
            return NOT_FOUND
        try:
            row = await self._fetchone(SELECT_LABOURS + " WHERE id = %s", (key,))
        except StorageUnavailableError:
            return CONNECTION_FAILURE
        if row is None:
            return NOT_FOUND
        return labour_from_document(_labour_row_to_document(row))

    async def insert_labour(self, labour: Labour) -> Labour:
        labour.id = new_id()
        if labour.created_at is None:
            labour.created_at = utcnow()
        await self._cursor(
            """
            INSERT INTO labours (id, name, phone, payments, created_at)
            VALUES (%(id)s, %(name)s, %(phone)s, %(payments)s, %(created_at)s)
            """,
            {
                "id": parse_identifier(labour.id),
                "name": labour.name,
                "phone": labour.phone,
                "payments": Jsonb([payment_to_document(p) for p in labour.payments]),
                "created_at": labour.created_at,
            },
        )
        logger.debug("Inserted labour %s", labour.id)
        return labour

    async def update_labour_fields(self, labour_id: str, changes: dict[str, Any]) -> None:
        await self._update_columns("labours", LABOUR_COLUMNS, labour_id, changes, "Labour")

    async def delete_labour(self, labour_id: str) -> None:
        await self._delete_row("labours", labour_id, "Labour")

    async def append_labour_payment(self, labour_id: str, payment: LabourPayment) -> None:
        await self._append_entry("labours", "payments", labour_id, payment_to_document(payment), "Labour")

    async def remove_labour_payment(self, labour_id: str, payment_id: str) -> None:
        await self._remove_entry("labours", "payments", labour_id, payment_id, None, "Payment")

    # Shared statements
    async def _update_columns(
        self,
        table: str,
        columns: dict[str, str],
        entity_id: str,
        changes: dict[str, Any],
        label: str,
    ) -> None:
        key = parse_identifier(entity_id)
        if key is None:
            raise EntityNotFoundError(f"{label} {entity_id} not found")
        assignments = [
            sql.SQL("{} = {}").format(sql.Identifier(columns[field]), sql.Placeholder(field))
            for field in changes
            if field in columns
        ]
        if not assignments:
            return
        query = sql.SQL("UPDATE {} SET {} WHERE id = {}").format(
            sql.Identifier(table), sql.SQL(", ").join(assignments), sql.Placeholder("entity_id")
        )
        params = {field: value for field, value in changes.items() if field in columns}
        params["entity_id"] = key
        if await self._rowcount(query, params) == 0:
            raise EntityNotFoundError(f"{label} {entity_id} not found")

    async def _delete_row(self, table: str, entity_id: str, label: str) -> None:
        key = parse_identifier(entity_id)
        if key is None:
            raise EntityNotFoundError(f"{label} {entity_id} not found")
        query = sql.SQL("DELETE FROM {} WHERE id = %s").format(sql.Identifier(table))
        if await self._rowcount(query, (key,)) == 0:
            raise EntityNotFoundError(f"{label} {entity_id} not found")
        logger.debug("Deleted %s %s", label.lower(), entity_id)

    async def _append_entry(
        self, table: str, column: str, parent_id: str, doc: dict[str, Any], label: str
    ) -> None:
        key = parse_identifier(parent_id)
        if key is None:
            raise EntityNotFoundError(f"{label} {parent_id} not found")
        query = sql.SQL("UPDATE {table} SET {column} = {column} || %(entry)s WHERE id = %(parent_id)s").format(
            table=sql.Identifier(table),
            column=sql.Identifier(column),
        )
        # Wrapping in a list makes || append one element instead of merging.
        if await self._rowcount(query, {"entry": Jsonb([doc]), "parent_id": key}) == 0:
            raise EntityNotFoundError(f"{label} {parent_id} not found")

    async def _remove_entry(
        self,
        table: str,
        column: str,
        parent_id: str,
        entry_id: str,
        expected_version: int | None,
        label: str,
    ) -> None:
        key = parse_identifier(parent_id)
        if key is None:
            raise EntityNotFoundError(f"Parent {parent_id} of {label.lower()} {entry_id} not found")
        query = sql.SQL(REMOVE_ENTRY).format(
            table=sql.Identifier(table),
            column=sql.Identifier(column),
            match=sql.SQL(_ENTRY_MATCH).format(column=sql.Identifier(column)),
        )
        params = {"parent_id": key, "entry_id": entry_id, "version": expected_version}
        if await self._rowcount(query, params) == 0:
            await self._explain_miss(table, column, key, entry_id, label)

    async def _explain_miss(self, table: str, column: str, key: Any, entry_id: str, label: str) -> None:
        """Raise the error matching why a targeted entry update matched nothing."""
        query = sql.SQL(ENTRY_LOOKUP).format(
            table=sql.Identifier(table),
            column=sql.Identifier(column),
        )
        row = await self._fetchone(query, {"parent_id": key, "entry_id": entry_id})
        if row is None:
            raise EntityNotFoundError(f"Parent {key} of {label.lower()} {entry_id} not found")
        if not row["has_entry"]:
            raise SubEntityNotFoundError(f"{label} {entry_id} not found")
        raise ConflictError(f"{label} {entry_id} was modified by another request")
