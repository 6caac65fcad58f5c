# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# This package contains the web-facing half of the API:
# - bootstrap.py: The fixed startup sequence and application factory
# - main.py: Process entry point
# - config.py: Settings from environment, .env and appsettings JSON
# - pipeline/: The ordered request pipeline (errors, HTTPS, routing,
#   CORS, authorization, dispatch)
# - routers/ and auth/: Endpoint handlers and their route tables
#
# The app layer is thin - it handles HTTP concerns and delegates
# business logic to the core/ package.
# =============================================================================
