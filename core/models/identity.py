# =============================================================================
# core/models/identity.py - Identity Schemas
# =============================================================================
# Users, roles and the authenticated principal carried through a request.
# =============================================================================

from pydantic import BaseModel, ConfigDict, Field

from .catalog import ApiModel


class ApplicationUser(BaseModel):
    """A stored user account. `password_hash` never leaves the service layer."""

    id: int
    user_name: str
    email: str
    password_hash: str
    lockout_enabled: bool = False


class Role(BaseModel):
    id: int
    name: str


class Principal(BaseModel):
    """
    Identity established from a validated bearer token.

    Immutable so stages and handlers cannot alter it mid-request.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    roles: frozenset[str] = frozenset()

    def is_in_role(self, role: str) -> bool:
        return role in self.roles


class AuthenticateRequest(ApiModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AuthenticateResponse(ApiModel):
    result: bool = False
    username: str = ""
    token: str = ""
    is_locked_out: bool = False
