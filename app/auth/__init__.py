# =============================================================================
# app/auth/__init__.py - Authentication Endpoints
# =============================================================================
# Issues bearer tokens for identity-store users. Validation of those tokens
# happens in the authorization stage of the request pipeline
# (app/pipeline/stages.py), not in route dependencies.
# =============================================================================

from app.auth.routes import ROUTES, authenticate

__all__ = [
    "ROUTES",
    "authenticate",
]
