"""Import/export adapter between flat CSV/JSON and the customer ledger."""

from ab_ledger.transfer.columns import EXPORT_HEADER, IMPORT_COLUMNS, resolve_header
from ab_ledger.transfer.exporting import (
    customers_to_csv,
    customers_to_json,
    export_customers_csv,
    export_customers_json,
)
from ab_ledger.transfer.importing import CustomerImporter, ImportResult

__all__ = [
    "CustomerImporter",
    "EXPORT_HEADER",
    "IMPORT_COLUMNS",
    "ImportResult",
    "customers_to_csv",
    "customers_to_json",
    "export_customers_csv",
    "export_customers_json",
    "resolve_header",
]
