import inspect
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from pdnslic.api import create_app
from pdnslic.api.routes import LicenseRoutes
from pdnslic.common.exceptions import StoreError
from pdnslic.engine.service import LicenseService
from pdnslic.store.persistence import InMemorySettingsStore


class UnavailableStore(InMemorySettingsStore):
    def get(self, key: str) -> str | None:
        raise StoreError(f"database locked while reading {key}")

    def count_domains(self) -> int:
        raise StoreError("database locked")


@pytest.fixture
def client(service: LicenseService) -> TestClient:
    return TestClient(create_app(service))


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200  # noqa: PLR2004
    assert response.json()["status"] == "ok"


def test_status_without_key(client: TestClient) -> None:
    response = client.get("/license/status")
    assert response.status_code == 200  # noqa: PLR2004
    body = response.json()
    assert body["valid"] is True
    assert body["license_type"] == "free"
    assert body["max_domains"] == 5  # noqa: PLR2004
    assert body["integrity"] is True


def test_installation_code(client: TestClient, service: LicenseService) -> None:
    response = client.get("/license/installation-code")
    assert response.json() == {"installation_code": service.installation_code()}


def test_install_and_remove_key(client: TestClient, issue) -> None:
    response = client.put("/license/key", json={"license_key": issue()})
    assert response.status_code == 200  # noqa: PLR2004
    body = response.json()
    assert body["level"] == "success"
    assert body["status"]["unlimited"] is True
    assert body["message"] == "License validated: Commercial Unlimited"

    assert client.get("/license/status").json()["license_type"] == "commercial"

    removed = client.delete("/license/key").json()
    assert removed["level"] == "success"
    assert removed["status"]["license_type"] == "free"


def test_install_foreign_key(client: TestClient, issue) -> None:
    license_key = issue(installation_id="PDNS-0000")
    body = client.put("/license/key", json={"license_key": license_key}).json()
    assert body["level"] == "danger"
    assert body["status"]["valid"] is False
    assert body["status"]["reason"] == "LX_BIND"
    assert body["status"]["max_domains"] == 5  # noqa: PLR2004


def test_install_malformed_key(client: TestClient) -> None:
    body = client.put("/license/key", json={"license_key": "PDNS-X-Y"}).json()
    assert body["level"] == "warning"
    assert body["status"]["reason"] == "LX_FMT"


def test_can_create(client: TestClient, store: InMemorySettingsStore) -> None:
    body = client.get("/domains/can-create").json()
    assert body == {"allowed": True, "limit": 5, "current_count": 0, "message": None}

    store.domain_count = 5
    body = client.get("/domains/can-create").json()
    assert body["allowed"] is False
    assert body["message"] == "Domain limit reached for current license (5)."


def test_store_failure_answers_503(public_key_path: Path) -> None:
    service = LicenseService(UnavailableStore(), public_key_path=public_key_path)
    client = TestClient(create_app(service))

    assert client.get("/license/status").status_code == 503  # noqa: PLR2004
    assert client.get("/domains/can-create").status_code == 503  # noqa: PLR2004
    assert client.get("/license/installation-code").status_code == 503  # noqa: PLR2004
    assert client.get("/health").status_code == 200  # noqa: PLR2004


def test_store_backed_handlers_run_in_threadpool(service: LicenseService) -> None:
    routes = LicenseRoutes(service)
    for handler in (
        routes.status,
        routes.installation_code,
        routes.update_key,
        routes.clear_key,
        routes.can_create,
    ):
        assert not inspect.iscoroutinefunction(handler), handler.__name__
