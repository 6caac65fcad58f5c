# =============================================================================
# tests/test_store.py - Store, Cache and Mapping Tests
# =============================================================================
# Run with: pytest tests/test_store.py -v
# =============================================================================

import asyncio

import pytest

from core.cache import MemoryCache
from core.mapping import MappingProfile, UriComposer
from core.models.catalog import CatalogItem
from core.services.catalog_service import page_count
from core.services.identity_service import hash_password, verify_password
from lib.store import InMemoryStore, StoreError


class TestInMemoryTable:
    def test_insert_assigns_ids(self):
        table = InMemoryStore().table("catalog_brands")

        first = asyncio.run(table.insert({"brand": "Azure"}))
        second = asyncio.run(table.insert({"brand": ".NET"}))

        assert (first["id"], second["id"]) == (1, 2)

    def test_explicit_id_and_duplicates(self):
        table = InMemoryStore().table("catalog_types")
        asyncio.run(table.insert({"id": 4, "type": "Mug"}))

        with pytest.raises(StoreError) as exc_info:
            asyncio.run(table.insert({"id": 4, "type": "Sheet"}))

        assert exc_info.value.code == "DUPLICATE_KEY"
        assert asyncio.run(table.insert({"type": "Sheet"}))["id"] == 5

    def test_filters_and_paging(self):
        table = InMemoryStore().table("catalog_items")
        for i in range(1, 8):
            asyncio.run(table.insert({"name": f"item {i}", "catalog_brand_id": i % 2}))

        odd = asyncio.run(table.list(catalog_brand_id=1))
        page = asyncio.run(table.list(limit=2, offset=2, catalog_brand_id=1))

        assert [row["id"] for row in odd] == [1, 3, 5, 7]
        assert [row["id"] for row in page] == [5, 7]
        assert asyncio.run(table.count(catalog_brand_id=0)) == 3

    def test_rows_are_copies(self):
        table = InMemoryStore().table("catalog_brands")
        row = asyncio.run(table.insert({"brand": "Azure"}))
        row["brand"] = "changed"

        assert asyncio.run(table.get(1))["brand"] == "Azure"

    def test_update_and_delete(self):
        table = InMemoryStore().table("catalog_brands")
        asyncio.run(table.insert({"brand": "Azure"}))

        updated = asyncio.run(table.update(1, {"id": 99, "brand": "Azure DevOps"}))

        assert updated == {"id": 1, "brand": "Azure DevOps"}
        assert asyncio.run(table.update(2, {"brand": "x"})) is None
        assert asyncio.run(table.delete(1)) is True
        assert asyncio.run(table.delete(1)) is False


class TestMemoryCache:
    def test_entries_expire(self):
        now = [0.0]
        cache = MemoryCache(ttl_seconds=30, clock=lambda: now[0])
        cache.set("brands", ["Azure"])

        assert cache.get("brands") == ["Azure"]
        now[0] = 31
        assert cache.get("brands") is None
        assert "brands" not in cache

    def test_get_or_create_calls_factory_once(self):
        calls = []

        async def factory():
            calls.append(1)
            return ["Mug"]

        cache = MemoryCache()

        async def twice():
            return await cache.get_or_create("types", factory), await cache.get_or_create("types", factory)

        assert asyncio.run(twice()) == (["Mug"], ["Mug"])
        assert len(calls) == 1


class TestMapping:
    def test_picture_uri_is_composed(self):
        mapper = MappingProfile(UriComposer("https://cdn.example.com/"))
        item = CatalogItem(
            id=1,
            name="Mug",
            price=8.5,
            picture_uri="http://catalogbaseurltobereplaced/images/products/2.png",
            catalog_type_id=1,
            catalog_brand_id=2,
        )

        dto = mapper.item(item)

        assert dto.picture_uri == "https://cdn.example.com/images/products/2.png"
        assert dto.model_dump(by_alias=True)["catalogBrandId"] == 2

    def test_without_base_url(self):
        assert UriComposer("").compose_picture_uri("http://x/1.png") == "http://x/1.png"


class TestHelpers:
    def test_page_count(self):
        assert page_count(12, 5) == 3
        assert page_count(10, 5) == 2
        assert page_count(12, None) == 1
        assert page_count(0, None) == 0

    def test_password_hashing(self):
        stored = hash_password("Pass@word1", iterations=1000)

        assert verify_password("Pass@word1", stored)
        assert not verify_password("wrong", stored)
        assert not verify_password("Pass@word1", "not-a-hash")
