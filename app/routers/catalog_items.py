# =============================================================================
# app/routers/catalog_items.py - Catalog Item Endpoints
# =============================================================================
# Reads are anonymous. Create, update and delete require the
# Administrators policy, which the authorization stage enforces before any
# of these handlers run.
# =============================================================================

import logging
from typing import Annotated

from fastapi import Path, Query

from app.dependencies import CatalogServiceDep, MapperDep, PrincipalDep
from app.routing import RouteSpec
from core.mapping import MappingProfile
from core.models.catalog import (
    CatalogItemResponse,
    CreateCatalogItemRequest,
    DeleteCatalogItemResponse,
    ListPagedCatalogItemResponse,
    UpdateCatalogItemRequest,
)
from core.services.catalog_service import CatalogService, page_count

logger = logging.getLogger(__name__)

TAGS = ("CatalogItemEndpoints",)
CatalogItemId = Annotated[int, Path(alias="catalogItemId", ge=1)]


# =============================================================================
# Endpoints
# =============================================================================

async def list_catalog_items(
    catalog: CatalogServiceDep,
    mapper: MapperDep,
    page_size: Annotated[int | None, Query(alias="pageSize", ge=0)] = None,
    page_index: Annotated[int, Query(alias="pageIndex", ge=0)] = 0,
    catalog_brand_id: Annotated[int | None, Query(alias="catalogBrandId")] = None,
    catalog_type_id: Annotated[int | None, Query(alias="catalogTypeId")] = None,
) -> ListPagedCatalogItemResponse:
    """
    List catalog items, optionally filtered by brand and type.

    Without a page size every matching item is returned on one page.
    """
    items, total = await catalog.list_items(
        page_size=page_size,
        page_index=page_index,
        catalog_brand_id=catalog_brand_id,
        catalog_type_id=catalog_type_id,
    )
    return ListPagedCatalogItemResponse(
        catalog_items=[mapper.item(item) for item in items],
        page_count=page_count(total, page_size),
    )


async def get_catalog_item(
    catalog_item_id: CatalogItemId,
    catalog: CatalogServiceDep,
    mapper: MapperDep,
) -> CatalogItemResponse:
    """Get a catalog item by id (404 when it doesn't exist)."""
    item = await catalog.get_item(catalog_item_id)
    return CatalogItemResponse(catalog_item=mapper.item(item))


async def create_catalog_item(
    body: CreateCatalogItemRequest,
    catalog: CatalogServiceDep,
    mapper: MapperDep,
    principal: PrincipalDep,
) -> CatalogItemResponse:
    """
    Create a catalog item.

    Raises:
        409: an item with the same name already exists
        400: the brand or type doesn't exist
    """
    item = await catalog.create_item(body)
    logger.info(f"Catalog item {item.id} created by {principal.name if principal else 'unknown'}")
    return CatalogItemResponse(catalog_item=mapper.item(item))


async def update_catalog_item(
    body: UpdateCatalogItemRequest,
    catalog: CatalogServiceDep,
    mapper: MapperDep,
) -> CatalogItemResponse:
    """Update an existing catalog item."""
    item = await catalog.update_item(body)
    return CatalogItemResponse(catalog_item=mapper.item(item))


async def delete_catalog_item(
    catalog_item_id: CatalogItemId,
    catalog: CatalogServiceDep,
    principal: PrincipalDep,
) -> DeleteCatalogItemResponse:
    """Delete a catalog item."""
    await catalog.delete_item(catalog_item_id)
    logger.info(f"Catalog item {catalog_item_id} deleted by {principal.name if principal else 'unknown'}")
    return DeleteCatalogItemResponse()


# =============================================================================
# Route Table
# =============================================================================

_READ = (CatalogService, MappingProfile)

ROUTES = [
    RouteSpec(
        path="/api/catalog-items",
        method="GET",
        endpoint=list_catalog_items,
        name="catalog_items.list",
        requires=_READ,
        response_model=ListPagedCatalogItemResponse,
        tags=TAGS,
        summary="List Catalog Items (paged)",
    ),
    RouteSpec(
        path="/api/catalog-items/{catalogItemId}",
        method="GET",
        endpoint=get_catalog_item,
        name="catalog_items.get",
        requires=_READ,
        response_model=CatalogItemResponse,
        tags=TAGS,
        summary="Get a Catalog Item by Id",
    ),
    RouteSpec(
        path="/api/catalog-items",
        method="POST",
        endpoint=create_catalog_item,
        name="catalog_items.create",
        policy="Administrators",
        requires=_READ,
        status_code=201,
        response_model=CatalogItemResponse,
        tags=TAGS,
        summary="Create a Catalog Item",
    ),
    RouteSpec(
        path="/api/catalog-items",
        method="PUT",
        endpoint=update_catalog_item,
        name="catalog_items.update",
        policy="Administrators",
        requires=_READ,
        response_model=CatalogItemResponse,
        tags=TAGS,
        summary="Update a Catalog Item",
    ),
    RouteSpec(
        path="/api/catalog-items/{catalogItemId}",
        method="DELETE",
        endpoint=delete_catalog_item,
        name="catalog_items.delete",
        policy="Administrators",
        requires=(CatalogService,),
        response_model=DeleteCatalogItemResponse,
        tags=TAGS,
        summary="Delete a Catalog Item",
    ),
]
