# =============================================================================
# app/routers/catalog_brands.py - Catalog Brand Endpoints
# =============================================================================
# Brands are reference data, so the list is served from the memory cache.
# =============================================================================

from app.dependencies import CacheDep, CatalogServiceDep, MapperDep
from app.routing import RouteSpec
from core.cache import MemoryCache
from core.mapping import MappingProfile
from core.models.catalog import ListCatalogBrandsResponse
from core.services.catalog_service import CatalogService

CACHE_KEY = "catalog-brands"


async def list_catalog_brands(
    catalog: CatalogServiceDep,
    mapper: MapperDep,
    cache: CacheDep,
) -> ListCatalogBrandsResponse:
    """List all catalog brands."""
    brands = await cache.get_or_create(CACHE_KEY, catalog.list_brands)
    return ListCatalogBrandsResponse(catalog_brands=[mapper.brand(b) for b in brands])


ROUTES = [
    RouteSpec(
        path="/api/catalog-brands",
        method="GET",
        endpoint=list_catalog_brands,
        name="catalog_brands.list",
        requires=(CatalogService, MappingProfile, MemoryCache),
        response_model=ListCatalogBrandsResponse,
        tags=("CatalogBrandEndpoints",),
        summary="List Catalog Brands",
    ),
]
