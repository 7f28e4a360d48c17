"""
Tests de la API del Control Center.
"""

import pytest
from fastapi.testclient import TestClient

from alert_core.config import AlertConfig
from device_link.config import LinkConfig
from device_link.transports.simulated import SimulatedTransport
from action_layer.api import app
from action_layer.control_center import ControlCenter, reset_control_center, set_control_center
from action_layer.host_launcher import MockLauncher
from action_layer.settings_store import Settings, SettingsStore


@pytest.fixture
def launcher():
    return MockLauncher()


@pytest.fixture
def center(launcher):
    center = ControlCenter(
        transport=SimulatedTransport(),
        store=SettingsStore(Settings(emergency_contacts=[])),
        launcher=launcher,
        link_config=LinkConfig(transport="simulated"),
        alert_config=AlertConfig(sms_delay_seconds=0)
    )
    set_control_center(center)
    yield center
    reset_control_center()


@pytest.fixture
def client(center):
    with TestClient(app) as client:
        yield client


class TestHealth:

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["service"] == "Airis-SH Control Center API"

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["device_connected"] is False


class TestDeviceEndpoints:

    def test_connect_and_status(self, client):
        response = client.post("/api/device/connect")

        assert response.json() == {"connected": True, "device_name": "AirMouse-SIM"}

        status = client.get("/api/device/status").json()
        assert status["device"]["state"] == "connected"
        assert status["device"]["transport"] == "simulated"

    def test_disconnect(self, client):
        client.post("/api/device/connect")

        response = client.post("/api/device/disconnect")

        assert response.json() == {"connected": False}
        assert client.get("/health").json()["device_connected"] is False

    def test_notify_counts_emergencies(self, client):
        client.post("/api/device/connect")

        for value in (1, 0, 2):
            response = client.post("/api/device/notify", json={"value": value})
            assert response.status_code == 200
            assert response.json()["delivered"] == 1

        stats = client.get("/api/device/status").json()["device"]["stats"]
        assert stats["notifications_received"] == 3
        assert stats["emergencies_detected"] == 1

    def test_notify_without_connection_is_not_delivered(self, client):
        response = client.post("/api/device/notify", json={"value": 1})

        assert response.json()["delivered"] == 0

    def test_notify_rejects_out_of_range_byte(self, client):
        response = client.post("/api/device/notify", json={"value": 300})

        assert response.status_code == 422


class TestContactEndpoints:

    def test_create_and_list(self, client):
        response = client.post("/api/contacts", json={"name": "Mom", "phone": "555-1234"})

        assert response.status_code == 201
        created = response.json()
        assert created["name"] == "Mom"

        contacts = client.get("/api/contacts").json()
        assert contacts["total"] == 1
        assert contacts["contacts"][0]["id"] == created["id"]

    def test_create_invalid_contact(self, client):
        response = client.post("/api/contacts", json={"name": "", "phone": "", "email": ""})

        assert response.status_code == 422
        assert response.json()["detail"]["errors"] == [
            "Name is required",
            "At least phone or email is required",
        ]
        assert client.get("/api/contacts").json()["total"] == 0

    def test_update_contact(self, client):
        contact_id = client.post("/api/contacts", json={"name": "Mom", "phone": "1"}).json()["id"]

        response = client.put(f"/api/contacts/{contact_id}", json={"email": "mom@home.org"})

        assert response.status_code == 200
        assert response.json()["email"] == "mom@home.org"
        assert response.json()["phone"] == "1"

    def test_update_with_invalid_email(self, client):
        contact_id = client.post("/api/contacts", json={"name": "Mom", "phone": "1"}).json()["id"]

        response = client.put(f"/api/contacts/{contact_id}", json={"email": "nope"})

        assert response.status_code == 422
        assert response.json()["detail"]["errors"] == ["Invalid email format"]

    def test_update_missing_contact(self, client):
        response = client.put("/api/contacts/99", json={"name": "x"})

        assert response.status_code == 404

    def test_delete_contact(self, client):
        contact_id = client.post("/api/contacts", json={"name": "Mom", "phone": "1"}).json()["id"]

        assert client.delete(f"/api/contacts/{contact_id}").json()["success"] is True
        assert client.delete(f"/api/contacts/{contact_id}").status_code == 404

    def test_validate(self, client):
        response = client.post("/api/contacts/validate", json={"name": "A", "phone": "abc"})

        assert response.json() == {"valid": False, "errors": ["Invalid phone number format"]}


class TestSettingsAndAlerts:

    def test_update_settings(self, client):
        response = client.put("/api/settings", json={"message_template": "help", "sos_enabled": False})

        assert response.json()["message_template"] == "help"
        assert response.json()["sos_enabled"] is False
        assert client.get("/api/settings").json()["sos_enabled"] is False

    def test_sos_test_without_contacts(self, client, launcher):
        response = client.post("/api/sos/test")

        body = response.json()
        assert body["level"] == "warning"
        assert body["status"]["error"] == "no_contacts"
        assert launcher.uris == []

    def test_sos_test_end_to_end(self, client, launcher):
        client.post("/api/contacts", json={"name": "Mom", "phone": "555-1234"})
        client.post("/api/contacts", json={"name": "Dr. Lee", "email": "lee@x.com"})
        client.put("/api/settings", json={"message_template": "help"})

        body = client.post("/api/sos/test").json()

        assert body["level"] == "success"
        assert body["status"]["success"] is True
        assert (body["status"]["sent"], body["status"]["failed"], body["status"]["called"]) == (2, 0, 1)
        assert launcher.uris[0] == "tel:5551234"

        alerts = client.get("/api/alerts").json()
        assert alerts["total"] == 1
        assert alerts["alerts"][0]["source"] == "test"
