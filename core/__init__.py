# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the business logic:
# - registry.py / sequencer.py: Capability registry and bootstrap sequencer
# - health.py: Health check service
# - contexts.py: Catalog and identity data contexts over a store
# - models/: Pydantic schemas for entities and API contracts
# - services/: Catalog, identity, token and seeding services
#
# Services raise the domain errors defined in app/exceptions.py but never
# touch the request or the capability registry directly.
# =============================================================================
