"""Shared test fixtures for Bundle-Engine."""

import os
import pytest
from httpx import ASGITransport, AsyncClient


@pytest.fixture
def app():
    """Create a test app with fresh settings and singletons."""
    os.environ["BUNDLE_ENVIRONMENT"] = "test"
    os.environ.pop("BUNDLE_LOW_BALANCE_RATIO", None)

    # Clear caches and singletons so new env vars take effect
    from bundle_engine.common.config import get_settings
    get_settings.cache_clear()

    from bundle_engine.deps import reset_singletons
    reset_singletons()

    from bundle_engine.app import create_app
    return create_app()


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def bundle():
    return {
        "id": "b-1",
        "title": "Strength Starter",
        "cadence": "monthly",
        "products_json": [
            {"name": "Whey Protein", "quantity": 2, "productId": 901},
            {"title": "Creatine", "qty": 1},
        ],
        "services_json": [
            {"name": "1:1 Training", "sessions": 8},
            {"serviceName": "Check-in call", "count": 2},
        ],
        "goals_json": ["Build strength", {"name": "Lose fat"}],
    }


@pytest.fixture
def subscription():
    return {
        "id": "s-1",
        "client_id": "c-1",
        "trainer_id": "t-1",
        "bundle_draft_id": "b-1",
        "status": "active",
        "sessions_included": 10,
        "sessions_used": 4,
    }
