# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for capabilities registered at bootstrap.
# Handlers never reach for globals: the registry travels with the
# application (`app.state.capabilities`) and is read per request.
#
# Usage:
#   @router.get("/things")
#   async def list_things(catalog: CatalogServiceDep): ...
# =============================================================================

from typing import Annotated, Any, Callable, Hashable

from fastapi import Depends, Request

from core.cache import MemoryCache
from core.mapping import MappingProfile
from core.models.identity import Principal
from core.registry import CapabilityRegistry
from core.services.catalog_service import CatalogService
from core.services.identity_service import IdentityService
from core.services.token_service import TokenClaimsService


def get_registry(request: Request) -> CapabilityRegistry:
    """The registry attached to the application during bootstrap."""
    return request.app.state.capabilities


def capability(key: Hashable) -> Callable[[Request], Any]:
    """Dependency that resolves one capability from the registry."""

    def resolve(request: Request) -> Any:
        return get_registry(request).get(key)

    resolve.__name__ = f"resolve_{getattr(key, '__name__', key)}"
    return resolve


def get_principal(request: Request) -> Principal | None:
    """Principal established by the authorization stage, if any."""
    return getattr(request.state, "principal", None)


# Type aliases for dependency injection
CatalogServiceDep = Annotated[CatalogService, Depends(capability(CatalogService))]
IdentityServiceDep = Annotated[IdentityService, Depends(capability(IdentityService))]
TokenClaimsDep = Annotated[TokenClaimsService, Depends(capability(TokenClaimsService))]
MapperDep = Annotated[MappingProfile, Depends(capability(MappingProfile))]
CacheDep = Annotated[MemoryCache, Depends(capability(MemoryCache))]
PrincipalDep = Annotated[Principal | None, Depends(get_principal)]
