"""Column table for the flat CSV representation of customers."""

import re
from dataclasses import dataclass

from ab_ledger.exceptions import ImportFormatError

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class Column:
    header: str
    field: str


IMPORT_COLUMNS = (
    Column("Name", "name"),
    Column("Phone", "phone"),
    Column("Address", "address"),
    Column("Bill Number", "billNumber"),
    Column("Amount Paid", "amountPaid"),
    Column("Amount Due", "amountDue"),
)

# Written on export from the computed summary; ignored on import.
COMPUTED_COLUMNS = (
    Column("Total Due", "totalDue"),
    Column("Total Paid", "totalPaid"),
    Column("Balance", "balance"),
)

EXPORT_HEADER = [c.header for c in IMPORT_COLUMNS + COMPUTED_COLUMNS]


def header_key(header: str) -> str:
    """Case- and spacing-insensitive form of a header cell."""
    return _WHITESPACE.sub("", header.replace("\ufeff", "")).lower()


_IMPORT_BY_KEY = {header_key(c.header): c for c in IMPORT_COLUMNS}
_COMPUTED_KEYS = {header_key(c.header) for c in COMPUTED_COLUMNS}


def resolve_header(headers: list[str]) -> dict[int, str]:
    """Map header positions to record fields before any row is read.

    Parameters
    ----------
    headers : list[str]
        Raw header cells.

    Returns
    -------
    dict[int, str]
        Cell index to field name, for the import columns only.

    Raises
    ------
    ImportFormatError
        If a required column is missing or an unknown column is present.
    """
    positions: dict[int, str] = {}
    unknown: list[str] = []
    for idx, raw in enumerate(headers):
        key = header_key(raw)
        if not key or key in _COMPUTED_KEYS:
            continue
        column = _IMPORT_BY_KEY.get(key)
        if column is None:
            unknown.append(raw.strip())
        elif column.field not in positions.values():
            positions[idx] = column.field

    if unknown:
        raise ImportFormatError(f"Unknown column(s): {', '.join(unknown)}")

    missing = [c.header for c in IMPORT_COLUMNS if c.field not in positions.values()]
    if missing:
        raise ImportFormatError(f"Missing required column(s): {', '.join(missing)}")

    return positions
