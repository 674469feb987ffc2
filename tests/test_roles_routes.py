from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from app.features.modules.manager import ModuleManager, get_module_manager
from app.main import app


@pytest.fixture()
def client(clean_db: None, module_manager: ModuleManager) -> Iterator[TestClient]:
    app.dependency_overrides[get_module_manager] = lambda: module_manager
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _create(client: TestClient, **role) -> dict:
    response = client.post("/roles", json=role)
    assert response.status_code == 201, response.text
    return response.json()


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "healthy"}


def test_catalog_lists_modules(client: TestClient) -> None:
    response = client.get("/role-form/catalog")

    assert response.status_code == 200
    namespaces = [ns["namespace"] for ns in response.json()["namespaces"]]
    assert namespaces == ["application", "monitoring", "reporting"]


def test_fields_reflect_submitted_state(client: TestClient) -> None:
    response = client.post(
        "/role-form/fields",
        json={"name": "Monitoring", "permissions": {"monitoring_s_a": True}},
    )

    assert response.status_code == 200
    monitoring = next(g for g in response.json()["groups"] if g["namespace"] == "monitoring")
    command = next(f for f in monitoring["fields"] if f["key"] == "monitoring_scommand_s_a")
    assert command["value"] is True
    assert command["disabled"] is True
    assert command["ignored"] is True


def test_create_get_update_delete(client: TestClient) -> None:
    created = _create(
        client,
        name="Operators",
        users="alice",
        permissions={"application_slog": True},
        restrictions={"_rapplication_sshare_susers": "bob"},
    )
    assert created == {"success": True, "message": "Role created"}

    editable = client.get("/roles/Operators").json()
    assert editable["permissions"]["application_slog"] is True
    assert editable["restrictions"] == {"_rapplication_sshare_susers": "bob"}

    editable["wildcard"] = True
    updated = client.put("/roles/Operators", json=editable, headers={"X-Remote-User": "admin"})
    assert updated.status_code == 200
    assert updated.json()["message"] == "Role updated"

    roles = client.get("/roles").json()
    assert [(r["name"], r["permissions"]) for r in roles] == [("Operators", "*")]
    assert roles[0]["restrictions"] == {"application/share/users": "bob"}

    deleted = client.delete("/roles/Operators")
    assert deleted.status_code == 200
    assert deleted.json()["message"] == "Role removed"
    assert client.get("/roles").json() == []


def test_create_duplicate_conflicts(client: TestClient) -> None:
    _create(client, name="Operators")

    response = client.post("/roles", json={"name": "Operators"})

    assert response.status_code == 409
    assert response.json() == {"success": False, "message": "Role creation failed"}


def test_unknown_role_is_not_found(client: TestClient) -> None:
    assert client.get("/roles/missing").status_code == 404
    assert client.put("/roles/missing", json={"name": "missing"}).status_code == 404
    response = client.delete("/roles/missing")
    assert response.status_code == 404
    assert response.json()["detail"] == "Role not found"


def test_validation_error_is_flattened(client: TestClient) -> None:
    response = client.post("/roles", json={"name": ""})

    assert response.status_code == 400
    assert "name" in response.json()


def test_role_names_with_slashes_are_reachable(client: TestClient) -> None:
    _create(client, name="ops/admins", users="alice")

    editable = client.get("/roles/ops/admins")
    assert editable.status_code == 200
    assert editable.json()["users"] == "alice"

    updated = client.put("/roles/ops/admins", json={"name": "ops/admins", "users": "bob"})
    assert updated.status_code == 200

    deleted = client.delete("/roles/ops/admins")
    assert deleted.status_code == 200
    assert client.get("/roles").json() == []


def test_role_named_catalog_is_not_shadowed(client: TestClient) -> None:
    _create(client, name="catalog", groups="ops")

    response = client.get("/roles/catalog")

    assert response.status_code == 200
    assert response.json()["name"] == "catalog"
    assert response.json()["groups"] == "ops"


def test_rename_to_existing_role_conflicts(client: TestClient) -> None:
    _create(client, name="Operators")
    _create(client, name="Viewers")

    response = client.put("/roles/Viewers", json={"name": "Operators"})

    assert response.status_code == 409
    assert response.json() == {"success": False, "message": "Role update failed"}
    assert sorted(r["name"] for r in client.get("/roles").json()) == ["Operators", "Viewers"]
