# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# POST /api/authenticate exchanges a user name and password for a bearer
# token carrying the user's role claims.
# =============================================================================

import logging

from app.dependencies import IdentityServiceDep, TokenClaimsDep
from app.routing import RouteSpec
from core.models.identity import AuthenticateRequest, AuthenticateResponse
from core.services.identity_service import IdentityService
from core.services.token_service import TokenClaimsService

logger = logging.getLogger(__name__)


async def authenticate(
    body: AuthenticateRequest,
    identity: IdentityServiceDep,
    tokens: TokenClaimsDep,
) -> AuthenticateResponse:
    """
    Authenticate a user.

    A wrong user name or password is not an error: the response has
    `result: false` and no token.
    """
    response = AuthenticateResponse(username=body.username)
    sign_in = await identity.check_password_sign_in(body.username, body.password)
    response.is_locked_out = sign_in.is_locked_out

    if sign_in.succeeded:
        response.result = True
        response.token = await tokens.get_token(body.username)
        logger.info(f"Issued token for {body.username}")
    else:
        logger.warning(f"Failed sign-in for {body.username}")

    return response


ROUTES = [
    RouteSpec(
        path="/api/authenticate",
        method="POST",
        endpoint=authenticate,
        name="auth.authenticate",
        requires=(IdentityService, TokenClaimsService),
        response_model=AuthenticateResponse,
        tags=("AuthEndpoints",),
        summary="Authenticates a user",
    ),
]
