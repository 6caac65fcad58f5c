# =============================================================================
# core/contexts.py - Persistence Contexts
# =============================================================================
# Named groupings of tables over a Store. The catalog and identity data are
# registered as separate capabilities so they can live in separate stores.
# =============================================================================

from __future__ import annotations

from lib.store import Store, Table


class CatalogContext:
    """Catalog brands, types and items."""

    BRANDS = "catalog_brands"
    TYPES = "catalog_types"
    ITEMS = "catalog_items"

    def __init__(self, store: Store):
        self.store = store

    @property
    def brands(self) -> Table:
        return self.store.table(self.BRANDS)

    @property
    def types(self) -> Table:
        return self.store.table(self.TYPES)

    @property
    def items(self) -> Table:
        return self.store.table(self.ITEMS)


class IdentityContext:
    """Users, roles and the user/role join table."""

    USERS = "identity_users"
    ROLES = "identity_roles"
    USER_ROLES = "identity_user_roles"

    def __init__(self, store: Store):
        self.store = store

    @property
    def users(self) -> Table:
        return self.store.table(self.USERS)

    @property
    def roles(self) -> Table:
        return self.store.table(self.ROLES)

    @property
    def user_roles(self) -> Table:
        return self.store.table(self.USER_ROLES)
