# =============================================================================
# app/pipeline/policies.py - CORS and Authorization Policies
# =============================================================================
# Declarative policy objects built during bootstrap and read by the CORS
# and authorization stages.
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass, field

from core.models.identity import Principal

CORS_POLICY_NAME = "CorsPolicy"


@dataclass(frozen=True)
class CorsPolicy:
    """
    Which cross-origin callers may use the API.

    Methods and headers default to "*" (any).
    """

    name: str
    allowed_origins: tuple[str, ...]
    allowed_methods: tuple[str, ...] = ("*",)
    allowed_headers: tuple[str, ...] = ("*",)
    allow_credentials: bool = False
    max_age: int = 600

    def is_origin_allowed(self, origin: str) -> bool:
        return "*" in self.allowed_origins or origin.rstrip("/") in self.allowed_origins

    def is_method_allowed(self, method: str) -> bool:
        return "*" in self.allowed_methods or method.upper() in self.allowed_methods

    def response_headers(self, origin: str) -> dict[str, str]:
        headers = {"Access-Control-Allow-Origin": origin}
        if self.allow_credentials:
            headers["Access-Control-Allow-Credentials"] = "true"
        return headers

    def preflight_headers(self, origin: str, method: str, requested_headers: str | None) -> dict[str, str]:
        headers = self.response_headers(origin)
        headers["Access-Control-Allow-Methods"] = (
            method.upper() if "*" in self.allowed_methods else ", ".join(self.allowed_methods)
        )
        if requested_headers:
            if "*" in self.allowed_headers:
                headers["Access-Control-Allow-Headers"] = requested_headers
            else:
                headers["Access-Control-Allow-Headers"] = ", ".join(self.allowed_headers)
        headers["Access-Control-Max-Age"] = str(self.max_age)
        return headers


@dataclass(frozen=True)
class AuthorizationPolicy:
    """A named rule a principal must satisfy to reach a route."""

    name: str
    require_authenticated: bool = True
    roles: frozenset[str] = field(default_factory=frozenset)

    def is_satisfied_by(self, principal: Principal | None) -> bool:
        if not self.require_authenticated:
            return True
        if principal is None:
            return False
        if not self.roles:
            return True
        return any(principal.is_in_role(role) for role in self.roles)


ANONYMOUS = AuthorizationPolicy("Anonymous", require_authenticated=False)
AUTHENTICATED = AuthorizationPolicy("Authenticated")
ADMINISTRATORS = AuthorizationPolicy("Administrators", roles=frozenset({"Administrators"}))


class PolicyTable:
    """Authorization policies by name."""

    def __init__(self, policies: tuple[AuthorizationPolicy, ...] = (ANONYMOUS, AUTHENTICATED, ADMINISTRATORS)):
        self._policies = {policy.name: policy for policy in policies}

    def get(self, name: str) -> AuthorizationPolicy | None:
        return self._policies.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._policies

    @property
    def names(self) -> list[str]:
        return sorted(self._policies)
