# =============================================================================
# core/services/catalog_service.py - Catalog Business Logic
# =============================================================================
# Reads and writes catalog brands, types and items through the
# CatalogContext. Raises the API's domain exceptions; translating them into
# HTTP responses is the exception boundary's job.
# =============================================================================

import logging
import math

from app.exceptions import (
    CatalogItemNotFoundError,
    CatalogReferenceNotFoundError,
    DuplicateCatalogItemError,
)
from core.contexts import CatalogContext
from core.models.catalog import (
    CatalogBrand,
    CatalogItem,
    CatalogType,
    CreateCatalogItemRequest,
    UpdateCatalogItemRequest,
)

logger = logging.getLogger(__name__)


def page_count(total_items: int, page_size: int | None) -> int:
    """Number of pages for `total_items`; unpaged results are a single page."""
    if page_size and page_size > 0:
        return math.ceil(total_items / page_size)
    return 1 if total_items > 0 else 0


class CatalogService:
    """
    Service for catalog operations.

    Provides a clean interface between API routes and the catalog store.
    """

    def __init__(self, context: CatalogContext):
        self.context = context

    # -------------------------------------------------------------------------
    # Reference data
    # -------------------------------------------------------------------------

    async def list_brands(self) -> list[CatalogBrand]:
        return [CatalogBrand(**row) for row in await self.context.brands.list()]

    async def list_types(self) -> list[CatalogType]:
        return [CatalogType(**row) for row in await self.context.types.list()]

    # -------------------------------------------------------------------------
    # Items
    # -------------------------------------------------------------------------

    async def list_items(
        self,
        page_size: int | None = None,
        page_index: int = 0,
        catalog_brand_id: int | None = None,
        catalog_type_id: int | None = None,
    ) -> tuple[list[CatalogItem], int]:
        """
        Filtered page of items.

        Returns:
            (items on the requested page, total matching items)
        """
        filters = {}
        if catalog_brand_id is not None:
            filters["catalog_brand_id"] = catalog_brand_id
        if catalog_type_id is not None:
            filters["catalog_type_id"] = catalog_type_id

        total = await self.context.items.count(**filters)
        if page_size and page_size > 0:
            rows = await self.context.items.list(
                limit=page_size,
                offset=max(page_index, 0) * page_size,
                **filters,
            )
        else:
            rows = await self.context.items.list(**filters)
        return [CatalogItem(**row) for row in rows], total

    async def get_item(self, catalog_item_id: int) -> CatalogItem:
        row = await self.context.items.get(catalog_item_id)
        if row is None:
            raise CatalogItemNotFoundError(catalog_item_id)
        return CatalogItem(**row)

    async def create_item(self, request: CreateCatalogItemRequest) -> CatalogItem:
        if await self.context.items.first(name=request.name) is not None:
            raise DuplicateCatalogItemError(request.name)
        await self._check_references(request)

        row = await self.context.items.insert(request.model_dump())
        logger.info(f"Created catalog item {row['id']} ({request.name})")
        return CatalogItem(**row)

    async def update_item(self, request: UpdateCatalogItemRequest) -> CatalogItem:
        await self.get_item(request.id)
        await self._check_references(request)

        row = await self.context.items.update(request.id, request.model_dump(exclude={"id"}))
        if row is None:
            raise CatalogItemNotFoundError(request.id)
        logger.info(f"Updated catalog item {request.id}")
        return CatalogItem(**row)

    async def delete_item(self, catalog_item_id: int) -> None:
        if not await self.context.items.delete(catalog_item_id):
            raise CatalogItemNotFoundError(catalog_item_id)
        logger.info(f"Deleted catalog item {catalog_item_id}")

    async def _check_references(self, request: CreateCatalogItemRequest) -> None:
        if await self.context.brands.get(request.catalog_brand_id) is None:
            raise CatalogReferenceNotFoundError("brand", request.catalog_brand_id)
        if await self.context.types.get(request.catalog_type_id) is None:
            raise CatalogReferenceNotFoundError("type", request.catalog_type_id)
