# =============================================================================
# core/mapping.py - Record to DTO Mapping
# =============================================================================
# Maps stored catalog records onto the DTOs the API returns. Picture URIs
# are stored with a placeholder host which is swapped for the configured
# catalog base URL on the way out.
# =============================================================================

from core.models.catalog import (
    CatalogBrand,
    CatalogBrandDto,
    CatalogItem,
    CatalogItemDto,
    CatalogType,
    CatalogTypeDto,
)
from core.services.seeding import PICTURE_BASE_URL_PLACEHOLDER


class UriComposer:
    def __init__(self, catalog_base_url: str = ""):
        self.catalog_base_url = catalog_base_url.rstrip("/")

    def compose_picture_uri(self, uri_template: str) -> str:
        if not self.catalog_base_url:
            return uri_template
        return uri_template.replace(PICTURE_BASE_URL_PLACEHOLDER, self.catalog_base_url)


class MappingProfile:
    """Registered once during bootstrap and shared by every handler."""

    def __init__(self, uri_composer: UriComposer):
        self.uri_composer = uri_composer

    def brand(self, brand: CatalogBrand) -> CatalogBrandDto:
        return CatalogBrandDto(id=brand.id, name=brand.brand)

    def type(self, catalog_type: CatalogType) -> CatalogTypeDto:
        return CatalogTypeDto(id=catalog_type.id, name=catalog_type.type)

    def item(self, item: CatalogItem) -> CatalogItemDto:
        dto = CatalogItemDto.model_validate(item.model_dump())
        dto.picture_uri = self.uri_composer.compose_picture_uri(item.picture_uri)
        return dto
