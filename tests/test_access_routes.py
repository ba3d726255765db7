# tests/test_access_routes.py

"""
Tests for the /access, /auth and /health endpoints.
"""

from fastapi import APIRouter, Depends
from fastapi.testclient import TestClient
from unittest.mock import Mock, patch

from core.session import get_session_registry
from dependencies.auth import requires_module


def test_me_dynamic_role(client: TestClient, login_as):
    login_as("Cashier")

    response = client.get("/access/me")
    assert response.status_code == 200

    data = response.json()
    assert data["role"] == "Cashier"
    assert data["policy"] == "dynamic"
    assert data["module_permissions"]["payments"] == {"view": True}
    assert data["module_permissions"]["reports"] == {"view": False}
    assert "access_control" not in data["module_permissions"]
    assert data["first_accessible_path"] == "/dashboard"


def test_me_requires_token(client: TestClient):
    response = client.get("/access/me")
    assert response.status_code in (401, 403)


def test_module_check(client: TestClient, login_as):
    login_as("Records Clerk")

    assert client.get("/access/modules/reports").json()["allowed"] is True
    assert client.get("/access/modules/reports?action=delete").json()["allowed"] is True
    assert client.get("/access/modules/dashboard").json()["allowed"] is False
    assert client.get("/access/modules/bingo_night").json()["allowed"] is False


def test_first_path(client: TestClient, login_as):
    login_as("Records Clerk")
    assert client.get("/access/first-path").json() == {"path": "/payments"}

    login_as("Super Admin", user_id="boss")
    assert client.get("/access/first-path").json() == {"path": "/dashboard"}


def test_gate_endpoint_anonymous(client: TestClient):
    response = client.post("/access/gate", json={"module_id": "payments", "path": "/payments"})

    assert response.status_code == 200
    data = response.json()
    assert data["state"] == "UNAUTHENTICATED"
    assert data["redirect_to"] == "/"
    assert data["preserved_from"] == "/payments"


def test_gate_endpoint_denied(client: TestClient, login_as):
    login_as("No Access")
    data = client.post("/access/gate", json={"module_id": "payments", "path": "/payments"}).json()

    assert data["state"] == "AUTHENTICATED_DENIED"
    assert data["redirect_to"] == "/"


def test_reload_picks_up_changed_record(client: TestClient, login_as, role_store):
    login_as("Cashier")
    assert client.get("/access/modules/reports").json()["allowed"] is False

    role_store.save("cashier", {"role_name": "Cashier", "modules": ["Reports"]})
    # Cached until reloaded
    assert client.get("/access/modules/reports").json()["allowed"] is False

    data = client.post("/access/reload").json()
    assert data["module_permissions"]["reports"] == {"view": True}


def test_logout_drops_cached_session(client: TestClient, login_as):
    login_as("Cashier")
    client.get("/access/me")
    assert len(get_session_registry()) == 1

    response = client.post("/auth/logout")
    assert response.status_code == 200
    assert len(get_session_registry()) == 0


# -----------------------------------------------------
# Catalog endpoints
# -----------------------------------------------------
def test_catalog_role_permissions(client: TestClient):
    data = client.get("/access/catalog/roles/Viewer/permissions").json()
    assert "view_payments" in data["permissions"]
    assert "edit_payment" not in data["permissions"]

    unknown = client.get("/access/catalog/roles/Janitor/permissions").json()
    assert unknown["permissions"] == []
    assert unknown["modules"] == []


def test_catalog_check(client: TestClient):
    body = {"role": "Officer", "permissions": ["view_members", "delete_member"]}
    assert client.post("/access/catalog/check", json=body).json()["allowed"] is False
    assert client.post("/access/catalog/check", json={**body, "mode": "any"}).json()["allowed"] is True


def test_catalog_module_check(client: TestClient):
    data = client.get("/access/catalog/roles/Viewer/modules/Payments?action=edit").json()
    assert data["allowed"] is False
    assert data["actions"]["view"] is True


# -----------------------------------------------------
# Route guard dependency
# -----------------------------------------------------
def _guarded_client(app):
    router = APIRouter()

    @router.get("/payments", dependencies=[Depends(requires_module("payments"))])
    def payments_page():
        return {"page": "payments"}

    app.include_router(router)
    return TestClient(app)


def test_requires_module_allows(app, login_as):
    login_as("Cashier")
    response = _guarded_client(app).get("/payments")
    assert response.status_code == 200
    assert response.json() == {"page": "payments"}


def test_requires_module_unauthenticated(app):
    response = _guarded_client(app).get("/payments")

    assert response.status_code == 401
    detail = response.json()["detail"]
    assert detail["state"] == "UNAUTHENTICATED"
    assert detail["preserved_from"] == "/payments"


def test_requires_module_denied(app, login_as):
    login_as("Field Auditor")
    response = _guarded_client(app).get("/payments")

    assert response.status_code == 403
    detail = response.json()["detail"]
    assert detail["state"] == "AUTHENTICATED_DENIED"
    assert detail["redirect_to"] == "/citizens"


def test_requires_module_loading(app, login_as):
    login_as("Cashier")
    client = _guarded_client(app)
    client.get("/payments")

    session = get_session_registry().get("user-1")
    session.loading = True
    session.pending_role = "Cashier"

    response = client.get("/payments")
    assert response.status_code == 503
    assert response.json()["detail"]["state"] == "LOADING"
    assert response.headers["retry-after"] == "1"


# -----------------------------------------------------
# Health
# -----------------------------------------------------
def test_health_app(client: TestClient):
    assert client.get("/health/app").json()["status"] == "ok"


def test_health_db_not_configured(client: TestClient):
    with patch("core.supabase_client.get_supabase_client", return_value=None):
        data = client.get("/health/db").json()
    assert data["status"] == "not_configured"


def test_startup_logs_routes_without_a_path(app):
    # Included routers and mounts do not always expose .path
    app.router.routes.append(Mock(spec=[]))

    with TestClient(app) as test_client:
        assert test_client.app is app
