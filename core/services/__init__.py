# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .catalog_service import CatalogService
from .identity_service import IdentityService, SignInResult
from .token_service import InvalidTokenError, TokenClaimsService, TokenValidator

__all__ = [
    "CatalogService",
    "IdentityService",
    "SignInResult",
    "InvalidTokenError",
    "TokenClaimsService",
    "TokenValidator",
]
