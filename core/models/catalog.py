# =============================================================================
# core/models/catalog.py - Catalog Schemas
# =============================================================================
# Catalog records as stored, and the API contract built on them:
# - CatalogBrand / CatalogType / CatalogItem: persisted records
# - *Dto: what the API returns (camelCase on the wire)
# - Create/Update requests and list responses
# =============================================================================

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base for API payloads: camelCase aliases, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Stored Records
# =============================================================================

class CatalogBrand(BaseModel):
    id: int
    brand: str


class CatalogType(BaseModel):
    id: int
    type: str


class CatalogItem(BaseModel):
    id: int
    name: str
    description: str = ""
    price: float
    picture_uri: str = ""
    catalog_type_id: int
    catalog_brand_id: int


# =============================================================================
# DTOs
# =============================================================================

class CatalogBrandDto(ApiModel):
    id: int
    name: str


class CatalogTypeDto(ApiModel):
    id: int
    name: str


class CatalogItemDto(ApiModel):
    id: int
    name: str
    description: str
    price: float
    picture_uri: str
    catalog_type_id: int
    catalog_brand_id: int


# =============================================================================
# Requests
# =============================================================================

class CreateCatalogItemRequest(ApiModel):
    """
    Body of POST /api/catalog-items.

    Example:
        {
            "catalogBrandId": 2,
            "catalogTypeId": 2,
            "name": ".NET Bot Black Sweatshirt",
            "description": ".NET Bot Black Sweatshirt",
            "price": 19.5
        }
    """

    catalog_brand_id: int
    catalog_type_id: int
    name: str = Field(..., min_length=1, max_length=50)
    description: str = ""
    price: float = Field(..., gt=0)
    picture_uri: str = ""


class UpdateCatalogItemRequest(CreateCatalogItemRequest):
    id: int


# =============================================================================
# Responses
# =============================================================================

class ListCatalogBrandsResponse(ApiModel):
    catalog_brands: list[CatalogBrandDto] = []


class ListCatalogTypesResponse(ApiModel):
    catalog_types: list[CatalogTypeDto] = []


class CatalogItemResponse(ApiModel):
    catalog_item: CatalogItemDto


class ListPagedCatalogItemResponse(ApiModel):
    catalog_items: list[CatalogItemDto] = []
    page_count: int = 0


class DeleteCatalogItemResponse(ApiModel):
    status: str = "Deleted"
