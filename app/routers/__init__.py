# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# Each module declares its handlers and a ROUTES list of RouteSpecs:
# - health.py: Health probe (answered by the routing stage)
# - catalog_brands.py / catalog_types.py: Cached reference data
# - catalog_items.py: Catalog item CRUD
#
# The route tables are collected in app/bootstrap.py and mounted when the
# application is built.
# =============================================================================

from . import catalog_brands
from . import catalog_items
from . import catalog_types
from . import health

__all__ = [
    "catalog_brands",
    "catalog_items",
    "catalog_types",
    "health",
]
