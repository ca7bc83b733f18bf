#!/usr/bin/env python3
"""Seed a ledger database with demo customers, payments and labourers.

Every record goes through LedgerService, so phone normalization, seed
transactions and validation behave exactly as for real input.
"""

import argparse
import asyncio
import logging
import random
import sys
import time
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from ab_ledger.config import LedgerConfig
from ab_ledger.exceptions import LedgerError
from ab_ledger.generators import CustomerGenerator, LabourGenerator
from ab_ledger.logging import setup_logging
from ab_ledger.service import LedgerService
from ab_ledger.store import LedgerGateway, MemoryGateway, PostgresGateway, StoreClient

logger = logging.getLogger(__name__)


async def seed(
    gateway: LedgerGateway,
    customers: int,
    labours: int,
    max_payments: int,
    seed_value: int | None,
    phone_prefix: str,
) -> dict[str, int]:
    """Create demo records and return how many of each were written."""
    service = LedgerService(gateway, phone_prefix=phone_prefix)
    customer_gen = CustomerGenerator(seed=seed_value)
    labour_gen = LabourGenerator(seed=seed_value + 1 if seed_value is not None else None)
    counts = {"customers": 0, "transactions": 0, "labours": 0, "labour_payments": 0}

    for payload in customer_gen.generate_batch(customers):
        customer = await service.add_customer(payload)
        counts["customers"] += 1
        counts["transactions"] += len(customer.transactions)
        for payment in customer_gen.payments(customer.id, random.randint(0, max_payments)):
            await service.add_payment(payment)
            counts["transactions"] += 1

    for payload in labour_gen.generate_batch(labours):
        labour = await service.add_labour(payload)
        counts["labours"] += 1
        for payment in labour_gen.payments(labour.id, random.randint(0, max_payments)):
            await service.add_labour_payment(payment)
            counts["labour_payments"] += 1

    return counts


async def run(args: argparse.Namespace, config: LedgerConfig) -> dict[str, int]:
    client = None if args.dry_run else StoreClient(config.postgres)
    gateway: LedgerGateway = MemoryGateway() if client is None else PostgresGateway(client)
    try:
        return await seed(
            gateway,
            customers=args.customers,
            labours=args.labours,
            max_payments=args.max_payments,
            seed_value=args.seed,
            phone_prefix=config.imports.phone_prefix,
        )
    finally:
        if client is not None:
            await client.close()


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed the AB INTERIOR ledger with demo data",
    )
    parser.add_argument(
        "--customers",
        type=int,
        default=25,
        help="Number of customers to create (default: 25)",
    )
    parser.add_argument(
        "--labours",
        type=int,
        default=5,
        help="Number of labourers to create (default: 5)",
    )
    parser.add_argument(
        "--max-payments",
        type=int,
        default=6,
        help="Maximum extra transactions per customer/labourer (default: 6)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducibility",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Generate into an in-memory store instead of PostgreSQL",
    )
    args = parser.parse_args()

    config = LedgerConfig.from_env()
    setup_logging(config.log_level, config.log_format)

    start = time.perf_counter()
    try:
        counts = asyncio.run(run(args, config))
    except LedgerError as e:
        logger.error("Seeding failed: %s", e)
        sys.exit(1)
    elapsed = time.perf_counter() - start

    print("\n" + "=" * 50)
    print("SEED SUMMARY")
    print("=" * 50)
    for name, count in counts.items():
        print(f"  {name:<20} {count:>8,}")
    print(f"\n  Elapsed: {elapsed:.2f}s")
    print("=" * 50)


if __name__ == "__main__":
    main()
