# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the catalog public API:
# - test_registry.py / test_sequencer.py: Startup orchestration primitives
# - test_bootstrap.py: The fixed startup sequence and application factory
# - test_pipeline.py: Request pipeline stages on a small application
# - test_api.py / test_health.py: Endpoints on the bootstrapped application
# - test_config.py, test_seeding.py, test_store.py, test_telemetry.py
#
# Run tests with: pytest
# =============================================================================
