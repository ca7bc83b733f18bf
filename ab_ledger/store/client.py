"""Lazily connected PostgreSQL client shared by every request.

Usage
-----
client = StoreClient(PostgresConfig())
gateway = PostgresGateway(client)
"""

from __future__ import annotations

import logging

import psycopg
from psycopg.rows import dict_row

from ab_ledger.config import PostgresConfig
from ab_ledger.exceptions import StorageUnavailableError

logger = logging.getLogger(__name__)

SCHEMA_DDL = (
    """
    CREATE TABLE IF NOT EXISTS customers (
        id uuid PRIMARY KEY,
        name text NOT NULL,
        phone text NOT NULL,
        address text NOT NULL,
        bill_number text,
        amount_paid numeric,
        amount_due numeric,
        transactions jsonb NOT NULL DEFAULT '[]'::jsonb,
        created_at timestamptz NOT NULL DEFAULT now()
    )
    """,
    "CREATE INDEX IF NOT EXISTS customers_phone_idx ON customers (phone)",
    """
    CREATE TABLE IF NOT EXISTS labours (
        id uuid PRIMARY KEY,
        name text NOT NULL,
        phone text NOT NULL,
        payments jsonb NOT NULL DEFAULT '[]'::jsonb,
        created_at timestamptz NOT NULL DEFAULT now()
    )
    """,
)


class StoreClient:
    """Owns the single process-wide connection to the document store.

    The connection is opened on the first :meth:`connect` call and reused
    afterwards. A new connection is attempted only while the cached handle
    is ``None``; a broken connection is not replaced automatically.

    Parameters
    ----------
    config : PostgresConfig
        Connection settings; ``connect_timeout`` bounds establishment.
    """

    def __init__(self, config: PostgresConfig | None = None) -> None:
        self.config = config or PostgresConfig()
        self._conn: psycopg.AsyncConnection | None = None

    @property
    def connected(self) -> bool:
        return self._conn is not None

    async def connect(self) -> psycopg.AsyncConnection:
        """Return the shared connection, opening it on first use.

        Raises
        ------
        StorageUnavailableError
            If the server cannot be reached within ``connect_timeout``.
        """
        if self._conn is not None:
            return self._conn

        try:
            conn = await psycopg.AsyncConnection.connect(
                self.config.connection_string,
                connect_timeout=self.config.connect_timeout,
                autocommit=True,
                row_factory=dict_row,
            )
        except psycopg.OperationalError as e:
            logger.error(
                "Could not connect to %s:%s/%s: %s",
                self.config.host,
                self.config.port,
                self.config.database,
                e,
            )
            raise StorageUnavailableError("Document store is unreachable") from e

        try:
            for statement in SCHEMA_DDL:
                await conn.execute(statement)
        except psycopg.Error as e:
            await conn.close()
            logger.error(
                "Could not prepare schema on %s/%s: %s", self.config.host, self.config.database, e
            )
            raise StorageUnavailableError("Document store schema could not be prepared") from e

        if self._conn is not None:
            # Another request finished connecting while this one was waiting.
            await conn.close()
            return self._conn

        logger.info("Connected to %s:%s/%s", self.config.host, self.config.port, self.config.database)
        self._conn = conn
        return conn

    async def close(self) -> None:
        """Close the shared connection (tests and scripts only)."""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
