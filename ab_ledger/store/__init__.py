"""Persistence gateway backends."""

from ab_ledger.store.base import (
    CONNECTION_FAILURE,
    NOT_FOUND,
    UNAVAILABLE,
    LedgerGateway,
    Outcome,
    parse_identifier,
)
from ab_ledger.store.client import StoreClient
from ab_ledger.store.memory import MemoryGateway
from ab_ledger.store.postgres import PostgresGateway

__all__ = [
    "CONNECTION_FAILURE",
    "LedgerGateway",
    "MemoryGateway",
    "NOT_FOUND",
    "Outcome",
    "PostgresGateway",
    "StoreClient",
    "UNAVAILABLE",
    "parse_identifier",
]
