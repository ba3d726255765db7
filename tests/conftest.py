# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import Mock
from typing import Generator

from main import create_app
from core.role_store import InMemoryRoleStore, get_role_store
from core.session import get_session_registry
from dependencies.auth import CurrentUser, get_current_user, get_optional_auth


ROLE_RECORDS = {
    # Current shape written by the permission matrix screen
    "cashier": {
        "role_name": "Cashier",
        "description": "Front desk payments",
        "module_permissions": {
            "dashboard": {"view": True},
            "payments": {"view": True},
            "reports": False,
            "access_control": {"view": True},
        },
    },
    # Legacy flat module list
    "records_clerk": {
        "roleName": "Records Clerk",
        "modules": ["Payments", "Reports"],
    },
    # Custom role stored under a timestamp key, found by name scan
    "1718000000000": {
        "roleName": "Field Auditor",
        "modulePermissions": {"senior_citizens": {"edit": True}},
    },
    # Record with nothing granted
    "no_access": {
        "role_name": "No Access",
        "module_permissions": {},
    },
}


@pytest.fixture(scope="function")
def role_store() -> InMemoryRoleStore:
    return InMemoryRoleStore(ROLE_RECORDS)


@pytest.fixture(scope="function")
def app(role_store):
    """Create a test FastAPI application instance backed by the in-memory store."""
    application = create_app()
    application.dependency_overrides[get_role_store] = lambda: role_store
    yield application
    application.dependency_overrides = {}


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def login_as(app):
    """
    Pretend Supabase already validated a token for a user with `role`.
    Requests made without calling this carry no token at all.

        login_as("Viewer")
    """

    def _login(role, user_id="user-1", email="user@example.com"):
        user = CurrentUser(id=user_id, email=email, role=role)
        app.dependency_overrides[get_current_user] = lambda: user
        app.dependency_overrides[get_optional_auth] = lambda: user
        return user

    return _login


@pytest.fixture
def mock_supabase_client():
    """Create a mock Supabase client."""
    mock_client = Mock()
    mock_table = Mock()
    mock_client.table.return_value = mock_table
    return mock_client


@pytest.fixture(autouse=True)
def reset_sessions():
    """Drop cached sessions before and after each test."""
    get_session_registry().clear()
    yield
    get_session_registry().clear()
