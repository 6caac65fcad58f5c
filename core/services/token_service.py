# =============================================================================
# core/services/token_service.py - JWT Issuing and Validation
# =============================================================================
# TokenClaimsService issues HS256 bearer tokens carrying the user name and
# role claims. TokenValidator is the authentication scheme: it turns a
# bearer token back into a Principal or raises InvalidTokenError.
# =============================================================================

import logging
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt

from core.models.identity import Principal
from core.services.identity_service import IdentityService

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


class InvalidTokenError(Exception):
    """The bearer token is missing claims, malformed, expired or forged."""


class TokenClaimsService:
    """Creates signed tokens for authenticated users."""

    def __init__(self, identity: IdentityService, secret_key: str, lifetime: timedelta):
        self.identity = identity
        self._secret_key = secret_key
        self.lifetime = lifetime

    async def get_token(self, user_name: str) -> str:
        user = await self.identity.find_by_name(user_name)
        if user is None:
            raise ValueError(f"User {user_name} does not exist")
        roles = await self.identity.get_roles(user)
        now = datetime.now(timezone.utc)
        claims = {
            "sub": user.user_name,
            "name": user.user_name,
            "roles": roles,
            "iat": int(now.timestamp()),
            "exp": int((now + self.lifetime).timestamp()),
        }
        return jwt.encode(claims, self._secret_key, algorithm=ALGORITHM)


class TokenValidator:
    """
    JWT bearer authentication scheme.

    Only the signature and expiry are validated; issuer and audience are
    not part of the token contract.
    """

    scheme = "Bearer"

    def __init__(self, secret_key: str):
        self._secret_key = secret_key

    def validate(self, token: str) -> Principal:
        """
        Decode a bearer token.

        Raises:
            InvalidTokenError: if the token cannot be trusted
        """
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[ALGORITHM])
        except ExpiredSignatureError:
            logger.warning("JWT token has expired")
            raise InvalidTokenError("Token has expired") from None
        except JWTError as e:
            logger.warning(f"JWT validation failed: {e}")
            raise InvalidTokenError("Invalid token") from None

        name = payload.get("name") or payload.get("sub")
        if not name:
            logger.warning("JWT token missing 'sub' claim")
            raise InvalidTokenError("Invalid token: missing user name")

        roles = payload.get("roles") or []
        if isinstance(roles, str):
            roles = [roles]
        return Principal(name=name, roles=frozenset(roles))
