# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - catalog.py: Catalog entities, DTOs and endpoint request/response models
# - identity.py: Users, roles, principals and the authenticate contract
#
# Entities use snake_case fields (store rows); the API models serialize
# with camelCase aliases.
# =============================================================================

# -----------------------------------------------------------------------------
# Catalog Models
# -----------------------------------------------------------------------------
from .catalog import (
    ApiModel,
    CatalogBrand,
    CatalogBrandDto,
    CatalogItem,
    CatalogItemDto,
    CatalogItemResponse,
    CatalogType,
    CatalogTypeDto,
    CreateCatalogItemRequest,
    DeleteCatalogItemResponse,
    ListCatalogBrandsResponse,
    ListCatalogTypesResponse,
    ListPagedCatalogItemResponse,
    UpdateCatalogItemRequest,
)

# -----------------------------------------------------------------------------
# Identity Models
# -----------------------------------------------------------------------------
from .identity import (
    ApplicationUser,
    AuthenticateRequest,
    AuthenticateResponse,
    Principal,
    Role,
)

__all__ = [
    # Catalog
    "ApiModel",
    "CatalogBrand",
    "CatalogBrandDto",
    "CatalogItem",
    "CatalogItemDto",
    "CatalogItemResponse",
    "CatalogType",
    "CatalogTypeDto",
    "CreateCatalogItemRequest",
    "DeleteCatalogItemResponse",
    "ListCatalogBrandsResponse",
    "ListCatalogTypesResponse",
    "ListPagedCatalogItemResponse",
    "UpdateCatalogItemRequest",
    # Identity
    "ApplicationUser",
    "AuthenticateRequest",
    "AuthenticateResponse",
    "Principal",
    "Role",
]
