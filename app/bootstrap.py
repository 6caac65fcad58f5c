# =============================================================================
# app/bootstrap.py - Application Bootstrap
# =============================================================================
# The fixed startup sequence for the public API. Each step registers the
# capabilities it provides in the CapabilityRegistry; later steps and
# request handlers resolve them from there.
#
#   configuration -> persistence -> identity -> domain_services -> caching
#   -> authentication -> cors -> routing -> documentation -> health_checks
#   -> telemetry -> build -> seeding -> middleware -> listener
#
# Usage:
#   app = await build_application()                 # steps 1-14 (tests)
#   await build_sequence().run(BootstrapContext())  # all steps, serves
# =============================================================================

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Any

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from uvicorn import Config, Server

from app.auth import ROUTES as AUTH_ROUTES
from app.config import DEFAULT_CONFIG_FILE, Settings, load_settings
from app.docs import DocumentationOptions, install_openapi
from app.exceptions import validation_exception_handler
from app.pipeline import (
    CORS_POLICY_NAME,
    AuthorizationStage,
    CorsPolicy,
    CorsStage,
    DispatchStage,
    ExceptionBoundaryStage,
    HttpsRedirectionStage,
    Pipeline,
    PipelineMiddleware,
    PolicyTable,
    RoutingStage,
)
from app.routers import catalog_brands, catalog_items, catalog_types
from app.routers.health import HEALTH_PATH, SELF_CHECK_NAME, HealthProbe, self_check, store_check
from app.routing import RouteTable
from app.telemetry import TelemetrySink, configure_logging
from core.cache import MemoryCache
from core.contexts import CatalogContext, IdentityContext
from core.health import HealthCheckService
from core.mapping import MappingProfile, UriComposer
from core.registry import StartupError
from core.sequencer import BootstrapContext, BootstrapSequencer, BootstrapStep, StartupTimeoutError
from core.services.catalog_service import CatalogService
from core.services.identity_service import IdentityService
from core.services.seeding import seed_database
from core.services.token_service import TokenClaimsService, TokenValidator
from lib.store import InMemoryStore, Store
from lib.supabase_client import SupabaseStore

logger = logging.getLogger(__name__)

DATABASE_CHECK_NAME = "database"
LISTENER_STEP = "listener"


# =============================================================================
# Steps
# =============================================================================

def configure(context: BootstrapContext) -> None:
    """Load settings unless the caller passed a ready Settings object."""
    settings = context.options.get("settings")
    if settings is None:
        settings = load_settings(
            context.options.get("config_file", DEFAULT_CONFIG_FILE),
            **context.options.get("overrides", {}),
        )
    context.registry.register(Settings, settings)
    logger.info(f"Configuration loaded ({settings.ENVIRONMENT})")


def add_persistence(context: BootstrapContext) -> None:
    database = context.registry.get(Settings).DATABASE
    if database.use_only_in_memory:
        store: Store = InMemoryStore()
    else:
        if not database.supabase_url or not database.supabase_service_key:
            raise StartupError(
                "DATABASE__SUPABASE_URL and DATABASE__SUPABASE_SERVICE_KEY are "
                "required unless DATABASE__USE_ONLY_IN_MEMORY is set"
            )
        store = SupabaseStore(database.supabase_url, database.supabase_service_key)

    context.registry.register(Store, store)
    context.registry.register(CatalogContext, CatalogContext(store))
    context.registry.register(IdentityContext, IdentityContext(store))
    logger.info(f"Persistence: {store.backend} store")


def add_identity(context: BootstrapContext) -> None:
    context.registry.register(
        IdentityService, IdentityService(context.registry.get(IdentityContext))
    )


def add_domain_services(context: BootstrapContext) -> None:
    registry = context.registry
    settings = registry.get(Settings)
    registry.register(CatalogService, CatalogService(registry.get(CatalogContext)))
    registry.register(
        TokenClaimsService,
        TokenClaimsService(
            registry.get(IdentityService),
            settings.SECRET_KEY,
            timedelta(minutes=settings.TOKEN_LIFETIME_MINUTES),
        ),
    )


def add_caching(context: BootstrapContext) -> None:
    settings = context.registry.get(Settings)
    context.registry.register(MemoryCache, MemoryCache(ttl_seconds=settings.CACHE_TTL_SECONDS))


def add_authentication(context: BootstrapContext) -> None:
    settings = context.registry.get(Settings)
    context.registry.register(TokenValidator, TokenValidator(settings.SECRET_KEY))
    context.registry.register(PolicyTable, PolicyTable())


def add_cors(context: BootstrapContext) -> None:
    settings = context.registry.get(Settings)
    policy = CorsPolicy(CORS_POLICY_NAME, allowed_origins=tuple(settings.cors_origins_list))
    context.registry.register(CorsPolicy, policy)
    logger.info(f"CORS origins: {list(policy.allowed_origins)}")


def add_routing(context: BootstrapContext) -> None:
    """
    Register the mapper and the route table.

    The table is validated here: a route needing a capability nobody
    registered, or naming an unknown policy, aborts startup.
    """
    registry = context.registry
    settings = registry.get(Settings)
    registry.register(MappingProfile, MappingProfile(UriComposer(settings.CATALOG_BASE_URL)))

    routes = RouteTable(
        [
            *AUTH_ROUTES,
            *catalog_brands.ROUTES,
            *catalog_types.ROUTES,
            *catalog_items.ROUTES,
        ]
    )
    routes.validate(registry, registry.get(PolicyTable))
    registry.register(RouteTable, routes)


def add_documentation(context: BootstrapContext) -> None:
    context.registry.register(DocumentationOptions, DocumentationOptions())


def add_health_checks(context: BootstrapContext) -> None:
    service = HealthCheckService()
    service.add_check(SELF_CHECK_NAME, self_check)
    service.add_check(DATABASE_CHECK_NAME, store_check(context.registry.get(Store)), tags=("db",))
    context.registry.register(HealthCheckService, service)


def add_telemetry(context: BootstrapContext) -> None:
    context.registry.register(TelemetrySink, configure_logging(context.registry.get(Settings)))


def build_app(context: BootstrapContext) -> None:
    registry = context.registry
    settings = registry.get(Settings)
    options = registry.get(DocumentationOptions)
    sink = registry.get(TelemetrySink)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting PublicApi in {settings.ENVIRONMENT} mode")
        yield
        logger.info("Shutting down PublicApi")
        sink.stop()

    app = FastAPI(lifespan=lifespan, debug=settings.DEBUG, **options.fastapi_kwargs())
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    registry.get(RouteTable).mount(app)
    install_openapi(app, options)
    app.state.capabilities = registry
    registry.register(FastAPI, app)


async def seed(context: BootstrapContext) -> None:
    registry = context.registry
    settings = registry.get(Settings)
    timeout = settings.STARTUP_TIMEOUT_SECONDS
    try:
        await asyncio.wait_for(
            seed_database(
                registry.get(CatalogContext),
                registry.get(IdentityService),
                retry_attempts=settings.DATABASE.seed_retry_attempts,
                retry_delay_seconds=settings.DATABASE.seed_retry_delay_seconds,
            ),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        raise StartupTimeoutError("seeding", timeout) from None


def install_middleware(context: BootstrapContext) -> None:
    registry = context.registry
    settings = registry.get(Settings)
    routes = registry.get(RouteTable)

    pipeline = Pipeline(
        [
            ExceptionBoundaryStage(include_diagnostics=settings.is_development),
            HttpsRedirectionStage(enabled=settings.HTTPS_REDIRECTION, https_port=settings.HTTPS_PORT),
            RoutingStage(probes={HEALTH_PATH: HealthProbe(registry.get(HealthCheckService))}),
            CorsStage(registry.get(CorsPolicy)),
            AuthorizationStage(
                routes.route_policies(registry.get(PolicyTable)),
                registry.get(TokenValidator),
            ),
            DispatchStage(),
        ]
    )
    registry.get(FastAPI).add_middleware(PipelineMiddleware, pipeline=pipeline)
    registry.register(Pipeline, pipeline)
    logger.info(f"Request pipeline: {' -> '.join(pipeline.stage_names)}")


async def listen(context: BootstrapContext) -> None:
    """Freeze the registry and serve until shutdown."""
    registry = context.registry
    registry.freeze()
    settings = registry.get(Settings)
    config = Config(
        app=registry.get(FastAPI),
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=False,
        log_level="debug" if settings.DEBUG else "info",
    )
    logger.info(f"Listening on {settings.API_HOST}:{settings.API_PORT}")
    await Server(config).serve()


# =============================================================================
# Sequence
# =============================================================================

def build_sequence() -> BootstrapSequencer:
    return BootstrapSequencer(
        [
            BootstrapStep("configuration", configure, provides=(Settings,)),
            BootstrapStep(
                "persistence",
                add_persistence,
                requires=(Settings,),
                provides=(Store, CatalogContext, IdentityContext),
            ),
            BootstrapStep(
                "identity",
                add_identity,
                requires=(IdentityContext,),
                provides=(IdentityService,),
            ),
            BootstrapStep(
                "domain_services",
                add_domain_services,
                requires=(Settings, CatalogContext, IdentityService),
                provides=(CatalogService, TokenClaimsService),
            ),
            BootstrapStep("caching", add_caching, requires=(Settings,), provides=(MemoryCache,)),
            BootstrapStep(
                "authentication",
                add_authentication,
                requires=(Settings,),
                provides=(TokenValidator, PolicyTable),
            ),
            BootstrapStep("cors", add_cors, requires=(Settings,), provides=(CorsPolicy,)),
            BootstrapStep(
                "routing",
                add_routing,
                requires=(Settings, PolicyTable),
                provides=(MappingProfile, RouteTable),
            ),
            BootstrapStep("documentation", add_documentation, provides=(DocumentationOptions,)),
            BootstrapStep(
                "health_checks",
                add_health_checks,
                requires=(Store,),
                provides=(HealthCheckService,),
            ),
            BootstrapStep("telemetry", add_telemetry, requires=(Settings,), provides=(TelemetrySink,)),
            BootstrapStep(
                "build",
                build_app,
                requires=(Settings, DocumentationOptions, RouteTable, TelemetrySink),
                provides=(FastAPI,),
            ),
            BootstrapStep(
                "seeding",
                seed,
                requires=(Settings, CatalogContext, IdentityService),
            ),
            BootstrapStep(
                "middleware",
                install_middleware,
                requires=(
                    FastAPI,
                    RouteTable,
                    PolicyTable,
                    TokenValidator,
                    CorsPolicy,
                    HealthCheckService,
                ),
                provides=(Pipeline,),
            ),
            BootstrapStep(LISTENER_STEP, listen, requires=(FastAPI, Settings)),
        ]
    )


async def build_application(
    settings: Settings | None = None,
    config_file: str | None = DEFAULT_CONFIG_FILE,
    **overrides: Any,
) -> FastAPI:
    """
    Run every step except the listener and return the configured app.

    The registry is frozen on return and available as
    `app.state.capabilities`.

    Raises:
        StartupError: if any step fails
    """
    context = BootstrapContext(
        options={"settings": settings, "config_file": config_file, "overrides": overrides}
    )
    await build_sequence().run(context, skip=(LISTENER_STEP,))
    return context.registry.get(FastAPI)
