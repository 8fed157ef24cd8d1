#!/usr/bin/env python
"""Seed script to create the demo organization and its recruiting data.

Safe to run repeatedly: rows that already exist are skipped.

Usage:
    python scripts/seed_demo_tenant.py

Environment Variables:
    DATABASE_URL: PostgreSQL connection string
    SEED_ORG_SLUG: Organization slug (default: test-company)
    SEED_ORG_NAME: Organization name (default: Test Company Ltd)
"""

import os
import sys

from sqlalchemy.exc import SQLAlchemyError

from recruitiq.config import get_settings
from recruitiq.observability.logging_config import configure_logging
from recruitiq.seeding import DEMO_ORGANIZATION_NAME, DEMO_ORGANIZATION_SLUG, seed_demo_tenant


def main():
    """Create the demo tenant."""
    settings = get_settings()
    configure_logging(level=settings.LOG_LEVEL, json_format=False)

    slug = os.getenv("SEED_ORG_SLUG", DEMO_ORGANIZATION_SLUG)
    name = os.getenv("SEED_ORG_NAME", DEMO_ORGANIZATION_NAME)

    try:
        result = seed_demo_tenant(slug=slug, name=name)
    except ValueError as e:
        print(f"ERROR: Invalid seed values: {e}")
        sys.exit(1)
    except SQLAlchemyError as e:
        print(f"ERROR: Failed to seed demo tenant: {e}")
        sys.exit(1)

    print(f"Organization: {slug} ({result.organization_id})")
    if not result.created:
        print("Nothing to do, all demo records already exist")
    for kind, count in sorted(result.created.items()):
        print(f"  created {count} {kind}")


if __name__ == "__main__":
    main()
