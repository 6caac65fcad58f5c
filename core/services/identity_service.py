# =============================================================================
# core/services/identity_service.py - Identity Store Operations
# =============================================================================
# Users, roles and password verification over the IdentityContext.
#
# Passwords are stored as PBKDF2-HMAC-SHA256 hashes with a per-user salt:
#   "<iterations>$<salt hex>$<hash hex>"
# =============================================================================

import hashlib
import hmac
import logging
import os
from dataclasses import dataclass

from core.contexts import IdentityContext
from core.models.identity import ApplicationUser, Role

logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 100_000


def hash_password(password: str, iterations: int = PBKDF2_ITERATIONS) -> str:
    """Hash a password with a random 16-byte salt."""
    salt = os.urandom(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return f"{iterations}${salt.hex()}${digest.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time check of a password against a stored hash."""
    try:
        iterations, salt_hex, hash_hex = password_hash.split("$", 2)
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(hash_hex)
        iterations = int(iterations)
    except ValueError:
        logger.warning("Stored password hash has an unexpected format")
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return hmac.compare_digest(digest, expected)


@dataclass(frozen=True)
class SignInResult:
    succeeded: bool
    is_locked_out: bool = False


class IdentityService:
    """
    User and role management.

    Example:
        identity = IdentityService(IdentityContext(store))
        user = await identity.create_user("demo@example.com", "Pass@word1")
        await identity.add_to_role(user, "Administrators")
    """

    def __init__(self, context: IdentityContext):
        self.context = context

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    async def find_by_name(self, user_name: str) -> ApplicationUser | None:
        row = await self.context.users.first(user_name=user_name)
        return ApplicationUser(**row) if row else None

    async def create_user(self, user_name: str, password: str, email: str | None = None) -> ApplicationUser:
        row = await self.context.users.insert(
            {
                "user_name": user_name,
                "email": email or user_name,
                "password_hash": hash_password(password),
                "lockout_enabled": False,
            }
        )
        logger.info(f"Created user {user_name}")
        return ApplicationUser(**row)

    async def check_password_sign_in(self, user_name: str, password: str) -> SignInResult:
        user = await self.find_by_name(user_name)
        if user is None:
            return SignInResult(succeeded=False)
        if user.lockout_enabled:
            return SignInResult(succeeded=False, is_locked_out=True)
        return SignInResult(succeeded=verify_password(password, user.password_hash))

    # -------------------------------------------------------------------------
    # Roles
    # -------------------------------------------------------------------------

    async def find_role(self, name: str) -> Role | None:
        row = await self.context.roles.first(name=name)
        return Role(**row) if row else None

    async def create_role(self, name: str) -> Role:
        row = await self.context.roles.insert({"name": name})
        logger.info(f"Created role {name}")
        return Role(**row)

    async def add_to_role(self, user: ApplicationUser, role_name: str) -> None:
        role = await self.find_role(role_name)
        if role is None:
            raise ValueError(f"Role {role_name} does not exist")
        existing = await self.context.user_roles.first(user_id=user.id, role_id=role.id)
        if existing is None:
            await self.context.user_roles.insert({"user_id": user.id, "role_id": role.id})

    async def get_roles(self, user: ApplicationUser) -> list[str]:
        links = await self.context.user_roles.list(user_id=user.id)
        names = []
        for link in links:
            role = await self.context.roles.get(link["role_id"])
            if role:
                names.append(role["name"])
        return sorted(names)
