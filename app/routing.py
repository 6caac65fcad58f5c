# =============================================================================
# app/routing.py - Declarative Route Table
# =============================================================================
# Every application route is declared as a RouteSpec: path, method,
# handler, the authorization policy it needs and the capabilities its
# handler resolves. The table is checked during bootstrap, before the
# application is built, so a route that depends on something nobody
# registered fails startup instead of the first request.
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Iterable, Iterator

from fastapi import FastAPI

from app.pipeline.policies import AuthorizationPolicy, PolicyTable
from core.registry import CapabilityRegistry, MissingCapabilityError, StartupError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteSpec:
    path: str
    method: str
    endpoint: Callable[..., Any]
    name: str
    policy: str = "Anonymous"
    requires: tuple[Hashable, ...] = ()
    status_code: int = 200
    response_model: Any = None
    tags: tuple[str, ...] = ()
    summary: str | None = None


class RouteTable:
    """Ordered collection of RouteSpecs with unique names."""

    def __init__(self, routes: Iterable[RouteSpec] = ()):
        self._routes: list[RouteSpec] = []
        for route in routes:
            self.add(route)

    def add(self, route: RouteSpec) -> None:
        if any(existing.name == route.name for existing in self._routes):
            raise StartupError(f"Duplicate route name '{route.name}'")
        self._routes.append(route)

    def __iter__(self) -> Iterator[RouteSpec]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def validate(self, registry: CapabilityRegistry, policies: PolicyTable) -> None:
        """
        Check every route against what bootstrap has registered so far.

        Raises:
            MissingCapabilityError: a route needs an unregistered capability
            StartupError: a route names an unknown authorization policy
        """
        for route in self._routes:
            for key in route.requires:
                if key not in registry:
                    raise MissingCapabilityError(key, step=f"routing ({route.name})")
            if route.policy not in policies:
                raise StartupError(
                    f"Route '{route.name}' uses unknown authorization policy "
                    f"'{route.policy}' (known: {', '.join(policies.names)})"
                )

    def route_policies(self, policies: PolicyTable) -> dict[str, AuthorizationPolicy]:
        """Authorization policy per route name, for the authorization stage."""
        return {route.name: policies.get(route.policy) for route in self._routes}

    def mount(self, app: FastAPI) -> None:
        for route in self._routes:
            app.add_api_route(
                route.path,
                route.endpoint,
                methods=[route.method],
                name=route.name,
                status_code=route.status_code,
                response_model=route.response_model,
                tags=list(route.tags),
                summary=route.summary,
                openapi_extra={"x-authorization-policy": route.policy},
            )
        logger.info(f"Mounted {len(self._routes)} routes")
