#!/usr/bin/env python
"""Seed the default permission catalog, system roles and grants."""

import asyncio
import logging
import sys
from pathlib import Path

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rbac_core.config import get_settings
from rbac_core.database import get_engine
from rbac_core.services.seed_service import seed_default_rbac


async def seed() -> dict[str, int]:
    """Run the seed and release the engine afterwards."""
    try:
        return await seed_default_rbac()
    finally:
        await get_engine().dispose()


if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser(description="Seed default RBAC permissions and roles")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(level="DEBUG" if args.verbose else get_settings().log_level)
    results = asyncio.run(seed())
    print(
        f"Permissions created: {results['permissions_created']}, "
        f"roles created: {results['roles_created']}, "
        f"grants created: {results['grants_created']}"
    )
