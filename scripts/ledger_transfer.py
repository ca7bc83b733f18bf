#!/usr/bin/env python3
"""Export customers to CSV/JSON files, or import them from one.

Examples
--------
    python scripts/ledger_transfer.py export customers.csv
    python scripts/ledger_transfer.py export customers.json --compact
    python scripts/ledger_transfer.py import customers.csv
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from ab_ledger.config import LedgerConfig
from ab_ledger.exceptions import LedgerError
from ab_ledger.logging import setup_logging
from ab_ledger.queries import LedgerQueries
from ab_ledger.store import Outcome, PostgresGateway, StoreClient
from ab_ledger.transfer import CustomerImporter, export_customers_csv, export_customers_json

logger = logging.getLogger(__name__)

FORMATS = ("csv", "json")


def detect_format(path: Path, explicit: str | None) -> str:
    fmt = explicit or path.suffix.lstrip(".").lower()
    if fmt not in FORMATS:
        raise ValueError(f"Cannot tell the file format of {path}; pass --format csv|json")
    return fmt


async def export_file(gateway: PostgresGateway, path: Path, fmt: str, pretty: bool) -> bool:
    queries = LedgerQueries(gateway)
    if fmt == "csv":
        content = await export_customers_csv(queries)
    else:
        content = await export_customers_json(queries, pretty=pretty)
    if isinstance(content, Outcome):
        logger.error("Export aborted: customer store unavailable")
        return False
    path.write_text(content, encoding="utf-8")
    logger.info("Exported customers to %s", path)
    return True


async def import_file(gateway: PostgresGateway, path: Path, fmt: str, phone_prefix: str) -> dict:
    importer = CustomerImporter(gateway, phone_prefix=phone_prefix)
    text = path.read_text(encoding="utf-8")
    if fmt == "csv":
        result = await importer.import_csv(text)
    else:
        result = await importer.import_json(text)
    return result.as_dict()


async def run(args: argparse.Namespace, config: LedgerConfig) -> int:
    fmt = detect_format(args.path, args.format)
    client = StoreClient(config.postgres)
    gateway = PostgresGateway(client)
    try:
        if args.command == "export":
            return 0 if await export_file(gateway, args.path, fmt, not args.compact) else 1
        report = await import_file(gateway, args.path, fmt, config.imports.phone_prefix)
        print(json.dumps(report, indent=2))
        return 0
    finally:
        await client.close()


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Import or export AB INTERIOR customers")
    parser.add_argument("command", choices=["import", "export"], help="Transfer direction")
    parser.add_argument("path", type=Path, help="CSV or JSON file")
    parser.add_argument(
        "--format",
        choices=FORMATS,
        default=None,
        help="File format (default: taken from the file extension)",
    )
    parser.add_argument(
        "--compact",
        action="store_true",
        help="Write JSON exports without indentation",
    )
    args = parser.parse_args()

    config = LedgerConfig.from_env()
    setup_logging(config.log_level, config.log_format)

    try:
        code = asyncio.run(run(args, config))
    except (LedgerError, OSError, ValueError) as e:
        logger.error("Transfer failed: %s", e)
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
