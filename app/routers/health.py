# =============================================================================
# app/routers/health.py - Health Check Probe
# =============================================================================
# GET /api/health is answered by the routing stage directly (it never goes
# through CORS, authorization or dispatch) so it stays reachable when the
# database or identity store is down.
#
# It only reports the "selfapi" check, which is healthy by definition:
# a liveness probe. Other checks are registered for diagnostics but are not
# published on this route.
# =============================================================================

from fastapi.responses import JSONResponse
from starlette.requests import Request
from starlette.responses import Response

from core.health import (
    HealthCheckRegistration,
    HealthCheckResult,
    HealthCheckService,
    HealthPredicate,
)
from lib.store import Store

HEALTH_PATH = "/api/health"
SELF_CHECK_NAME = "selfapi"

def self_check() -> HealthCheckResult:
    return HealthCheckResult.healthy()


def is_self_check(registration: HealthCheckRegistration) -> bool:
    return registration.name == SELF_CHECK_NAME


def store_check(store: Store):
    """Health check that pings a persistence store."""

    async def check() -> HealthCheckResult:
        await store.ping()
        return HealthCheckResult.healthy(f"{store.backend} store reachable")

    return check


class HealthProbe:
    """
    Serializes the filtered health report as {"status": "<Healthy|...>"}.

    The response is always 200; the status is carried in the body only.
    """

    def __init__(self, service: HealthCheckService, predicate: HealthPredicate = is_self_check):
        self.service = service
        self.predicate = predicate

    async def __call__(self, request: Request) -> Response:
        report = await self.service.check_health(self.predicate)
        return JSONResponse(
            status_code=200,
            content={"status": report.status.value},
        )
