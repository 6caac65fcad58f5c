# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up environment variables before any imports
# - Builds a fully bootstrapped application (everything but the listener)
# - Issues tokens for the seeded demo and admin users
# =============================================================================

import asyncio
import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# Settings are read from the environment when the configuration step runs;
# the Seq sink is disabled so tests never try to reach a log server.

os.environ.setdefault("BASE_URLS__API_BASE", "http://localhost:5099/api/")
os.environ.setdefault("BASE_URLS__WEB_BASE", "http://localhost:44315/")
os.environ.setdefault("SEQ__ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "development")

import pytest
from fastapi.testclient import TestClient

from app.bootstrap import build_application
from app.config import load_settings
from core.services.seeding import ADMIN_USER, DEFAULT_PASSWORD, DEMO_USER


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def settings():
    """Settings for an in-memory, development-mode application."""
    return load_settings(config_file=None)


@pytest.fixture
def app(settings):
    """A bootstrapped application; the registry is already frozen."""
    return asyncio.run(build_application(settings))


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def _token(client, username: str) -> str:
    response = client.post(
        "/api/authenticate",
        json={"username": username, "password": DEFAULT_PASSWORD},
    )
    assert response.status_code == 200
    return response.json()["token"]


@pytest.fixture
def admin_headers(client):
    return {"Authorization": f"Bearer {_token(client, ADMIN_USER)}"}


@pytest.fixture
def demo_headers(client):
    return {"Authorization": f"Bearer {_token(client, DEMO_USER)}"}


@pytest.fixture
def new_item():
    """Body for a catalog item that is not in the seed data."""
    return {
        "catalogBrandId": 2,
        "catalogTypeId": 1,
        "name": ".NET Purple Mug",
        "description": "A purple mug",
        "price": 9.75,
    }
