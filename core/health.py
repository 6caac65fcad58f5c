# =============================================================================
# core/health.py - Health Check Registry
# =============================================================================
# Named health checks and the service that evaluates them.
#
# Each probe endpoint picks the checks it exposes with a predicate, so one
# service can back several probes (liveness only sees the self-check,
# other subsystems are still recorded but not published).
# =============================================================================

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    """Ordered from worst to best; the report takes the worst entry."""

    UNHEALTHY = "Unhealthy"
    DEGRADED = "Degraded"
    HEALTHY = "Healthy"

    @property
    def rank(self) -> int:
        return _RANK[self]


_RANK = {
    HealthStatus.UNHEALTHY: 0,
    HealthStatus.DEGRADED: 1,
    HealthStatus.HEALTHY: 2,
}


@dataclass(frozen=True)
class HealthCheckResult:
    status: HealthStatus
    description: str | None = None
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def healthy(cls, description: str | None = None) -> HealthCheckResult:
        return cls(HealthStatus.HEALTHY, description)

    @classmethod
    def degraded(cls, description: str | None = None) -> HealthCheckResult:
        return cls(HealthStatus.DEGRADED, description)

    @classmethod
    def unhealthy(cls, description: str | None = None) -> HealthCheckResult:
        return cls(HealthStatus.UNHEALTHY, description)


HealthCheck = Callable[[], "HealthCheckResult | Awaitable[HealthCheckResult]"]


@dataclass(frozen=True)
class HealthCheckRegistration:
    """
    A named check.

    `failure_status` is what gets reported when the check itself raises.
    """

    name: str
    check: HealthCheck
    tags: frozenset[str] = frozenset()
    failure_status: HealthStatus = HealthStatus.UNHEALTHY


@dataclass(frozen=True)
class HealthReportEntry:
    status: HealthStatus
    description: str | None
    duration_ms: float
    error: str | None = None


@dataclass(frozen=True)
class HealthReport:
    status: HealthStatus
    entries: dict[str, HealthReportEntry]


HealthPredicate = Callable[[HealthCheckRegistration], bool]


class HealthCheckService:
    """
    Evaluates registered health checks.

    Example:
        service = HealthCheckService()
        service.add_check("selfapi", lambda: HealthCheckResult.healthy())
        report = await service.check_health(lambda r: r.name == "selfapi")
    """

    def __init__(self) -> None:
        self._registrations: dict[str, HealthCheckRegistration] = {}

    @property
    def registrations(self) -> list[HealthCheckRegistration]:
        return list(self._registrations.values())

    def add_check(
        self,
        name: str,
        check: HealthCheck,
        tags: tuple[str, ...] = (),
        failure_status: HealthStatus = HealthStatus.UNHEALTHY,
    ) -> HealthCheckService:
        if name in self._registrations:
            raise ValueError(f"Health check '{name}' is already registered")
        self._registrations[name] = HealthCheckRegistration(
            name=name,
            check=check,
            tags=frozenset(tags),
            failure_status=failure_status,
        )
        return self

    async def check_health(self, predicate: HealthPredicate | None = None) -> HealthReport:
        selected = [
            registration
            for registration in self._registrations.values()
            if predicate is None or predicate(registration)
        ]
        results = await asyncio.gather(*(self._run_check(r) for r in selected))
        entries = {r.name: entry for r, entry in zip(selected, results)}

        status = HealthStatus.HEALTHY
        for entry in entries.values():
            if entry.status.rank < status.rank:
                status = entry.status
        return HealthReport(status=status, entries=entries)

    async def _run_check(self, registration: HealthCheckRegistration) -> HealthReportEntry:
        started = time.perf_counter()
        try:
            result = registration.check()
            if inspect.isawaitable(result):
                result = await result
            error = None
        except Exception as e:
            logger.warning(f"Health check '{registration.name}' failed: {e}")
            result = HealthCheckResult(registration.failure_status, str(e))
            error = type(e).__name__
        duration_ms = (time.perf_counter() - started) * 1000
        return HealthReportEntry(
            status=result.status,
            description=result.description,
            duration_ms=duration_ms,
            error=error,
        )
