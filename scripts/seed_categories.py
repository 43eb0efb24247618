#!/usr/bin/env python3
"""Seed product categories script.

Inserts the embedded default categories with their stable ids, so that
products submitted while the category table was unreachable still point
at real rows once it is back.

Usage:
    python scripts/seed_categories.py
    python scripts/seed_categories.py --create-tables
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select

from sellerdesk.catalog.categories import StaticCategoryList
from sellerdesk.catalog.models import Category
from sellerdesk.infrastructure.database import Base, async_session_factory, engine


async def create_tables() -> None:
    """Create database tables if they don't exist."""
    import sellerdesk.pos.barcode  # noqa: F401
    import sellerdesk.pos.sales  # noqa: F401
    import sellerdesk.pos.settings  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_categories() -> dict:
    """Insert missing default categories.

    Returns:
        Counts of created and already present categories.
    """
    defaults = StaticCategoryList()
    async with async_session_factory() as session:
        result = await session.execute(select(Category.name))
        existing = {name.lower() for name in result.scalars().all()}

        created = 0
        for ref in defaults.get_all():
            if ref.name.lower() in existing:
                continue
            session.add(Category(id=ref.id, name=ref.name))
            created += 1

        await session.commit()
        return {"created": created, "existing": len(existing)}


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed default product categories",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables before seeding (development only)",
    )

    args = parser.parse_args()

    print("=" * 60)
    print("SellerDesk Category Seeder")
    print("=" * 60)

    if args.create_tables:
        print("Creating database tables...")
        await create_tables()
        print("Tables ready.")
        print()

    result = await seed_categories()
    print(f"  Created: {result['created']} categories")
    print(f"  Already present: {result['existing']}")

    print("=" * 60)
    print("Seeding complete!")
    print("=" * 60)

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
