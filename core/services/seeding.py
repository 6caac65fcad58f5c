# =============================================================================
# core/services/seeding.py - Reference Data Seeding
# =============================================================================
# Populates an empty store with the catalog and identity data the API needs
# before it can serve requests.
#
# Seeding is idempotent per row: each brand, type and item is inserted only
# when its id is missing, and each role/user only created when missing. A
# retry after a partial write fills in the gaps, and running it against an
# already-seeded store changes nothing.
# =============================================================================

import asyncio
import logging
from typing import Any, Awaitable, Callable

from core.contexts import CatalogContext
from core.services.identity_service import IdentityService
from lib.store import StoreError, Table

logger = logging.getLogger(__name__)

DEFAULT_PASSWORD = "Pass@word1"
ADMINISTRATORS_ROLE = "Administrators"
DEMO_USER = "demouser@microsoft.com"
ADMIN_USER = "admin@microsoft.com"

PICTURE_BASE_URL_PLACEHOLDER = "http://catalogbaseurltobereplaced"

CATALOG_BRANDS = [
    {"id": 1, "brand": "Azure"},
    {"id": 2, "brand": ".NET"},
    {"id": 3, "brand": "Visual Studio"},
    {"id": 4, "brand": "SQL Server"},
    {"id": 5, "brand": "Other"},
]

CATALOG_TYPES = [
    {"id": 1, "type": "Mug"},
    {"id": 2, "type": "T-Shirt"},
    {"id": 3, "type": "Sheet"},
    {"id": 4, "type": "USB Memory Stick"},
]

# (type id, brand id, name, price)
_ITEMS = [
    (2, 2, ".NET Bot Black Sweatshirt", 19.5),
    (1, 2, ".NET Black & White Mug", 8.50),
    (2, 5, "Prism White T-Shirt", 12),
    (2, 2, ".NET Foundation Sweatshirt", 12),
    (3, 5, "Roslyn Red Sheet", 8.5),
    (2, 2, ".NET Blue Sweatshirt", 12),
    (2, 5, "Roslyn Red T-Shirt", 12),
    (2, 5, "Kudu Purple Sweatshirt", 8.5),
    (1, 5, "Cup<T> White Mug", 12),
    (3, 2, ".NET Foundation Sheet", 12),
    (3, 2, "Cup<T> Sheet", 8.5),
    (2, 5, "Prism White TShirt", 12),
]

CATALOG_ITEMS = [
    {
        "id": index,
        "catalog_type_id": type_id,
        "catalog_brand_id": brand_id,
        "name": name,
        "description": name,
        "price": float(price),
        "picture_uri": f"{PICTURE_BASE_URL_PLACEHOLDER}/images/products/{index}.png",
    }
    for index, (type_id, brand_id, name, price) in enumerate(_ITEMS, start=1)
]


async def with_retries(
    operation: Callable[[], Awaitable[Any]],
    attempts: int,
    delay_seconds: float,
    description: str,
) -> Any:
    """
    Run `operation`, retrying on StoreError.

    The store may still be starting when the service boots (containers
    coming up together). After the last attempt the error propagates.
    """
    attempt = 1
    while True:
        try:
            return await operation()
        except StoreError as e:
            if attempt >= attempts:
                logger.error(f"{description} failed after {attempt} attempts: {e}")
                raise
            logger.warning(f"{description} failed (attempt {attempt}/{attempts}): {e}")
            attempt += 1
            await asyncio.sleep(delay_seconds)


async def seed_missing_rows(table: Table, rows: list[dict[str, Any]]) -> int:
    """Insert each row whose id is not in `table` yet; returns how many were added."""
    added = 0
    for row in rows:
        if await table.get(row["id"]) is None:
            await table.insert(row)
            added += 1
    if added:
        logger.info(f"Seeded {added} rows into {table.name}")
    return added


class CatalogContextSeed:
    """Seeds brands, types and items."""

    @staticmethod
    async def seed(context: CatalogContext) -> None:
        await seed_missing_rows(context.brands, CATALOG_BRANDS)
        await seed_missing_rows(context.types, CATALOG_TYPES)
        await seed_missing_rows(context.items, CATALOG_ITEMS)


class IdentitySeed:
    """Seeds the administrators role, a demo user and an admin user."""

    @staticmethod
    async def seed(identity: IdentityService) -> None:
        if await identity.find_role(ADMINISTRATORS_ROLE) is None:
            await identity.create_role(ADMINISTRATORS_ROLE)

        if await identity.find_by_name(DEMO_USER) is None:
            await identity.create_user(DEMO_USER, DEFAULT_PASSWORD)

        admin = await identity.find_by_name(ADMIN_USER)
        if admin is None:
            admin = await identity.create_user(ADMIN_USER, DEFAULT_PASSWORD)
        await identity.add_to_role(admin, ADMINISTRATORS_ROLE)


async def seed_database(
    catalog: CatalogContext,
    identity: IdentityService,
    retry_attempts: int = 3,
    retry_delay_seconds: float = 1.0,
) -> None:
    """Seed every store the API depends on."""
    await with_retries(
        lambda: CatalogContextSeed.seed(catalog),
        retry_attempts,
        retry_delay_seconds,
        "Catalog seeding",
    )
    await with_retries(
        lambda: IdentitySeed.seed(identity),
        retry_attempts,
        retry_delay_seconds,
        "Identity seeding",
    )
