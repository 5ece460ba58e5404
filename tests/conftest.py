"""
Root test configuration and fixtures for the Honor Flight project.

This conftest.py provides common fixtures for the unit tests:
- an in-memory document store
- a request context
- a FastAPI TestClient running in bypass auth mode

Note: sys.path manipulation is handled here to ensure imports work correctly.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

# Add project root to path to allow imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Set AUTH_MODE before any imports that might load settings
os.environ.setdefault("AUTH_MODE", "bypass")

from honorflight.store.client import RequestContext  # noqa: E402
from tests.fixtures.fixtures import FakeDocumentStore  # noqa: E402


@pytest.fixture
def fake_store():
    """Empty in-memory document store."""
    return FakeDocumentStore()


@pytest.fixture
def ctx():
    """Request context carrying an already-issued session cookie."""
    return RequestContext(credential="AuthSession=test-token")


@pytest.fixture
def api_client(fake_store):
    """TestClient with the document store replaced by ``fake_store``.

    Docker detection is patched off so bypass auth is honored wherever the
    tests run.
    """
    from fastapi.testclient import TestClient

    from api.dependencies import get_document_store, get_request_context
    from api.settings import get_settings

    get_settings.cache_clear()
    with (
        patch.dict("os.environ", {"AUTH_MODE": "bypass"}),
        patch("api.settings._is_docker_environment", return_value=False),
        patch("honorflight.auth_middleware._is_docker_environment", return_value=False),
    ):
        from api.main import create_app

        app = create_app()

        async def override_context() -> RequestContext:
            return RequestContext(credential="AuthSession=test-token")

        app.dependency_overrides[get_document_store] = lambda: fake_store
        app.dependency_overrides[get_request_context] = override_context

        client = TestClient(app)
        yield client

    get_settings.cache_clear()
