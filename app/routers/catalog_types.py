# =============================================================================
# app/routers/catalog_types.py - Catalog Type Endpoints
# =============================================================================
# Types are reference data, so the list is served from the memory cache.
# =============================================================================

from app.dependencies import CacheDep, CatalogServiceDep, MapperDep
from app.routing import RouteSpec
from core.cache import MemoryCache
from core.mapping import MappingProfile
from core.models.catalog import ListCatalogTypesResponse
from core.services.catalog_service import CatalogService

CACHE_KEY = "catalog-types"


async def list_catalog_types(
    catalog: CatalogServiceDep,
    mapper: MapperDep,
    cache: CacheDep,
) -> ListCatalogTypesResponse:
    """List all catalog types."""
    types = await cache.get_or_create(CACHE_KEY, catalog.list_types)
    return ListCatalogTypesResponse(catalog_types=[mapper.type(t) for t in types])


ROUTES = [
    RouteSpec(
        path="/api/catalog-types",
        method="GET",
        endpoint=list_catalog_types,
        name="catalog_types.list",
        requires=(CatalogService, MappingProfile, MemoryCache),
        response_model=ListCatalogTypesResponse,
        tags=("CatalogTypeEndpoints",),
        summary="List Catalog Types",
    ),
]
