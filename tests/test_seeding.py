# =============================================================================
# tests/test_seeding.py - Reference Data Seeding Tests
# =============================================================================
# Run with: pytest tests/test_seeding.py -v
# =============================================================================

import asyncio

import pytest

from core.contexts import CatalogContext, IdentityContext
from core.services.identity_service import IdentityService
from core.services.seeding import (
    ADMIN_USER,
    ADMINISTRATORS_ROLE,
    CATALOG_BRANDS,
    CATALOG_ITEMS,
    CATALOG_TYPES,
    DEFAULT_PASSWORD,
    DEMO_USER,
    seed_database,
    with_retries,
)
from lib.store import InMemoryStore, InMemoryTable, StoreError


class FailingOnceTable(InMemoryTable):
    """In-memory table whose Nth insert fails once with a StoreError."""

    def __init__(self, name, fail_on_insert):
        super().__init__(name)
        self.fail_on_insert = fail_on_insert
        self.inserts = 0
        self.failures = 0

    async def insert(self, record):
        self.inserts += 1
        if self.inserts == self.fail_on_insert and self.failures == 0:
            self.failures += 1
            raise StoreError("connection reset", code="UNAVAILABLE")
        return await super().insert(record)


def seed(store):
    identity = IdentityService(IdentityContext(store))
    asyncio.run(seed_database(CatalogContext(store), identity, retry_delay_seconds=0))
    return identity


class TestSeedDatabase:
    """Seeding fills empty stores and leaves seeded ones alone."""

    def test_seeds_catalog(self):
        store = InMemoryStore()
        seed(store)

        snapshot = asyncio.run(store.snapshot())
        assert len(snapshot["catalog_brands"]) == len(CATALOG_BRANDS)
        assert len(snapshot["catalog_types"]) == len(CATALOG_TYPES)
        assert len(snapshot["catalog_items"]) == len(CATALOG_ITEMS) == 12

    def test_seeds_identity(self):
        identity = seed(InMemoryStore())

        async def check():
            admin = await identity.find_by_name(ADMIN_USER)
            demo = await identity.find_by_name(DEMO_USER)
            return (
                await identity.get_roles(admin),
                await identity.get_roles(demo),
                await identity.check_password_sign_in(DEMO_USER, DEFAULT_PASSWORD),
            )

        admin_roles, demo_roles, sign_in = asyncio.run(check())
        assert admin_roles == [ADMINISTRATORS_ROLE]
        assert demo_roles == []
        assert sign_in.succeeded

    def test_seeding_twice_equals_seeding_once(self):
        store = InMemoryStore()
        seed(store)
        first = asyncio.run(store.snapshot())

        seed(store)
        second = asyncio.run(store.snapshot())

        assert first == second

    def test_partially_seeded_catalog(self):
        """Existing rows are kept and only missing ids are added."""
        store = InMemoryStore()
        asyncio.run(store.table("catalog_brands").insert({"id": 1, "brand": "Existing"}))

        seed(store)

        brands = asyncio.run(store.table("catalog_brands").list())
        assert brands[0] == {"id": 1, "brand": "Existing"}
        assert [brand["id"] for brand in brands] == [1, 2, 3, 4, 5]
        assert asyncio.run(store.table("catalog_items").count()) == 12

    def test_retry_after_partial_insert_completes_catalog(self):
        """A store failure midway through the items is retried to completion."""
        store = InMemoryStore()
        items_table = FailingOnceTable("catalog_items", fail_on_insert=5)
        store._tables["catalog_items"] = items_table

        seed(store)

        items = asyncio.run(items_table.list())
        assert items_table.failures == 1
        assert len(items) == len(CATALOG_ITEMS) == 12
        assert [item["id"] for item in items] == list(range(1, 13))


class TestWithRetries:
    """Transient store failures are retried."""

    def test_succeeds_after_transient_failures(self):
        attempts = []

        async def flaky():
            attempts.append(1)
            if len(attempts) < 3:
                raise StoreError("connection refused", code="UNAVAILABLE")
            return "ok"

        result = asyncio.run(with_retries(flaky, 3, 0, "Test seeding"))

        assert result == "ok"
        assert len(attempts) == 3

    def test_gives_up_after_last_attempt(self):
        attempts = []

        async def down():
            attempts.append(1)
            raise StoreError("connection refused", code="UNAVAILABLE")

        with pytest.raises(StoreError):
            asyncio.run(with_retries(down, 2, 0, "Test seeding"))

        assert len(attempts) == 2

    def test_other_errors_are_not_retried(self):
        attempts = []

        async def broken():
            attempts.append(1)
            raise ValueError("bad data")

        with pytest.raises(ValueError):
            asyncio.run(with_retries(broken, 5, 0, "Test seeding"))

        assert len(attempts) == 1
