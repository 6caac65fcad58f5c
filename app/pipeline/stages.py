# =============================================================================
# app/pipeline/stages.py - Request Pipeline Stages
# =============================================================================
# The six stages of the request pipeline, in the order they run:
#
#   exception_boundary -> https_redirection -> routing -> cors
#       -> authorization -> dispatch
#
# Expected failures (unknown route, rejected origin, missing credentials)
# are ordinary responses produced by the stage that detects them. Only
# unexpected exceptions travel back up to the exception boundary.
# =============================================================================

from __future__ import annotations

import logging
import time
from typing import Awaitable, Callable, Mapping

from fastapi.responses import JSONResponse
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response
from starlette.routing import Match

from app.exceptions import (
    INTERNAL_ERROR_CODE,
    PublicApiException,
    problem_details,
    problem_response,
)
from app.pipeline.policies import AuthorizationPolicy, CorsPolicy
from app.pipeline.runner import CallNext
from core.services.token_service import InvalidTokenError, TokenValidator

logger = logging.getLogger(__name__)

Probe = Callable[[Request], Awaitable[Response]]


def is_preflight(request: Request) -> bool:
    return (
        request.method == "OPTIONS"
        and "origin" in request.headers
        and "access-control-request-method" in request.headers
    )


# =============================================================================
# 1. Exception Boundary
# =============================================================================

class ExceptionBoundaryStage:
    """
    Catches anything raised downstream and answers with one structured
    problem response. This stage does not raise.
    """

    name = "exception_boundary"

    def __init__(self, include_diagnostics: bool = False):
        self.include_diagnostics = include_diagnostics

    async def handle(self, request: Request, call_next: CallNext) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            if isinstance(exc, PublicApiException):
                logger.warning(f"{request.method} {request.url.path}: {exc.code} {exc.message}")
            else:
                logger.exception(f"Unhandled error for {request.method} {request.url.path}: {exc}")
            try:
                status_code, body = problem_details(exc, self.include_diagnostics)
                return JSONResponse(status_code=status_code, content=body)
            except Exception:
                logger.exception("Failed to build the error response")
                return problem_response(500, INTERNAL_ERROR_CODE, "An unexpected error occurred")


# =============================================================================
# 2. Transport Upgrade
# =============================================================================

class HttpsRedirectionStage:
    """Redirects plain HTTP to HTTPS when enabled (307, method preserved)."""

    name = "https_redirection"

    def __init__(self, enabled: bool = False, https_port: int | None = None):
        self.enabled = enabled
        self.https_port = https_port

    async def handle(self, request: Request, call_next: CallNext) -> Response:
        if not self.enabled:
            return await call_next(request)

        scheme = request.headers.get("x-forwarded-proto", request.url.scheme).lower()
        if scheme == "https":
            return await call_next(request)

        target = request.url.replace(scheme="https", port=self.https_port)
        return RedirectResponse(url=str(target), status_code=307)


# =============================================================================
# 3. Routing
# =============================================================================

class RoutingStage:
    """
    Matches the request against the application's routes.

    Probe paths (the health check) are answered here and never reach the
    later stages. The matched route is stored on `request.state.route`.
    """

    name = "routing"

    def __init__(self, probes: Mapping[str, Probe] | None = None):
        self.probes = dict(probes or {})

    async def handle(self, request: Request, call_next: CallNext) -> Response:
        path = request.url.path
        probe = self.probes.get(path)
        if probe is not None and request.method in ("GET", "HEAD"):
            return await probe(request)

        method = request.method
        if is_preflight(request):
            method = request.headers["access-control-request-method"].upper()
        scope = dict(request.scope, method=method)

        allowed: set[str] = set()
        for route in request.app.router.routes:
            match, child_scope = route.matches(scope)
            if match == Match.FULL:
                request.state.route = route
                request.state.route_params = child_scope.get("path_params", {})
                return await call_next(request)
            if match == Match.PARTIAL:
                allowed.update(getattr(route, "methods", None) or ())

        if allowed:
            return problem_response(
                405,
                "METHOD_NOT_ALLOWED",
                f"Method {method} is not allowed for {path}",
                headers={"Allow": ", ".join(sorted(allowed))},
            )
        return problem_response(404, "NOT_FOUND", f"No route matches {method} {path}")


# =============================================================================
# 4. CORS
# =============================================================================

class CorsStage:
    """Enforces the CORS policy for cross-origin requests."""

    name = "cors"

    def __init__(self, policy: CorsPolicy):
        self.policy = policy

    async def handle(self, request: Request, call_next: CallNext) -> Response:
        origin = request.headers.get("origin")
        if origin is None:
            return await call_next(request)

        own_origin = f"{request.url.scheme}://{request.url.netloc}"
        if origin == own_origin:
            return await call_next(request)

        if not self.policy.is_origin_allowed(origin):
            logger.info(f"CORS: rejected origin {origin} for {request.method} {request.url.path}")
            return problem_response(
                403,
                "CORS_ORIGIN_REJECTED",
                f"Origin {origin} is not allowed by policy {self.policy.name}",
            )

        if is_preflight(request):
            requested_method = request.headers["access-control-request-method"]
            if not self.policy.is_method_allowed(requested_method):
                return problem_response(
                    403,
                    "CORS_METHOD_REJECTED",
                    f"Method {requested_method} is not allowed by policy {self.policy.name}",
                )
            headers = self.policy.preflight_headers(
                origin,
                requested_method,
                request.headers.get("access-control-request-headers"),
            )
            response = Response(status_code=204, headers=headers)
            response.headers.add_vary_header("Origin")
            return response

        response = await call_next(request)
        response.headers.update(self.policy.response_headers(origin))
        response.headers.add_vary_header("Origin")
        return response


# =============================================================================
# 5. Authorization
# =============================================================================

class AuthorizationStage:
    """
    Applies the matched route's authorization policy.

    Routes without a policy (docs, OpenAPI schema) and anonymous routes
    pass straight through.
    """

    name = "authorization"

    def __init__(
        self,
        route_policies: Mapping[str, AuthorizationPolicy],
        validator: TokenValidator,
    ):
        self.route_policies = dict(route_policies)
        self.validator = validator

    async def handle(self, request: Request, call_next: CallNext) -> Response:
        route = getattr(request.state, "route", None)
        policy = self.route_policies.get(getattr(route, "name", None))
        if policy is None or not policy.require_authenticated:
            return await call_next(request)

        challenge = {"WWW-Authenticate": self.validator.scheme}
        scheme, _, token = request.headers.get("authorization", "").partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            return problem_response(401, "NOT_AUTHENTICATED", "Not authenticated", headers=challenge)

        try:
            principal = self.validator.validate(token.strip())
        except InvalidTokenError as e:
            return problem_response(401, "INVALID_TOKEN", str(e), headers=challenge)

        if not policy.is_satisfied_by(principal):
            logger.info(f"Authorization: {principal.name} does not satisfy policy {policy.name}")
            return problem_response(
                403,
                "FORBIDDEN",
                f"Policy {policy.name} is not satisfied",
            )

        request.state.principal = principal
        return await call_next(request)


# =============================================================================
# 6. Dispatch
# =============================================================================

class DispatchStage:
    """Hands the request to the framework endpoint."""

    name = "dispatch"

    async def handle(self, request: Request, call_next: CallNext) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.debug(
            f"{request.method} {request.url.path} -> {response.status_code} in {elapsed_ms:.1f}ms"
        )
        return response
