# =============================================================================
# app/pipeline/runner.py - Request Pipeline Runner
# =============================================================================
# Every request passes through one ordered list of stages. Each stage has
# the same contract:
#
#     async def handle(request, call_next) -> Response
#
# and either produces a response itself (short-circuit) or awaits
# `call_next(request)` to delegate downstream. The order is fixed and is
# checked when the pipeline is built.
#
# The whole pipeline is hosted by a single Starlette middleware; the
# framework endpoint (FastAPI's router) is what the last stage calls.
# =============================================================================

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Protocol, Sequence

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

CallNext = Callable[[Request], Awaitable[Response]]

STAGE_ORDER = (
    "exception_boundary",
    "https_redirection",
    "routing",
    "cors",
    "authorization",
    "dispatch",
)


class Stage(Protocol):
    name: str

    async def handle(self, request: Request, call_next: CallNext) -> Response:
        ...


class PipelineOrderError(Exception):
    """Raised when stages are missing, duplicated or out of order."""


class Pipeline:
    """
    Ordered composition of stages.

    Example:
        pipeline = Pipeline([
            ExceptionBoundaryStage(...),
            HttpsRedirectionStage(...),
            RoutingStage(...),
            CorsStage(...),
            AuthorizationStage(...),
            DispatchStage(),
        ])
        response = await pipeline.run(request, endpoint)
    """

    def __init__(self, stages: Sequence[Stage], order: Sequence[str] = STAGE_ORDER):
        names = [stage.name for stage in stages]
        if names != list(order):
            raise PipelineOrderError(
                f"Pipeline stages must be {list(order)}, got {names}"
            )
        self.stages = list(stages)

    @property
    def stage_names(self) -> list[str]:
        return [stage.name for stage in self.stages]

    async def run(self, request: Request, endpoint: CallNext) -> Response:
        return await self._invoke(0, request, endpoint)

    async def _invoke(self, index: int, request: Request, endpoint: CallNext) -> Response:
        if index == len(self.stages):
            return await endpoint(request)

        stage = self.stages[index]

        async def call_next(next_request: Request) -> Response:
            return await self._invoke(index + 1, next_request, endpoint)

        return await stage.handle(request, call_next)


class PipelineMiddleware(BaseHTTPMiddleware):
    """Hosts a Pipeline inside the ASGI middleware stack."""

    def __init__(self, app, pipeline: Pipeline) -> None:
        super().__init__(app)
        self.pipeline = pipeline

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        return await self.pipeline.run(request, call_next)
