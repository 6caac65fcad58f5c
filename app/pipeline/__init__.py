# =============================================================================
# app/pipeline/ - Request Pipeline
# =============================================================================
# - runner.py: Stage contract, Pipeline composition, hosting middleware
# - stages.py: The six stages in their fixed order
# - policies.py: CORS and authorization policy objects
# =============================================================================

from app.pipeline.policies import (
    ADMINISTRATORS,
    ANONYMOUS,
    AUTHENTICATED,
    CORS_POLICY_NAME,
    AuthorizationPolicy,
    CorsPolicy,
    PolicyTable,
)
from app.pipeline.runner import (
    STAGE_ORDER,
    Pipeline,
    PipelineMiddleware,
    PipelineOrderError,
    Stage,
)
from app.pipeline.stages import (
    AuthorizationStage,
    CorsStage,
    DispatchStage,
    ExceptionBoundaryStage,
    HttpsRedirectionStage,
    RoutingStage,
)

__all__ = [
    "ADMINISTRATORS",
    "ANONYMOUS",
    "AUTHENTICATED",
    "CORS_POLICY_NAME",
    "AuthorizationPolicy",
    "CorsPolicy",
    "PolicyTable",
    "STAGE_ORDER",
    "Pipeline",
    "PipelineMiddleware",
    "PipelineOrderError",
    "Stage",
    "AuthorizationStage",
    "CorsStage",
    "DispatchStage",
    "ExceptionBoundaryStage",
    "HttpsRedirectionStage",
    "RoutingStage",
]
