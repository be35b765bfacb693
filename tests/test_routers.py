"""API tests for geofence, map settings, fleet and notification endpoints."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from app.database import get_db
from app.routers import fleet, geofence, map_settings, notifications, volunteers
from app.services.change_feed import ChangeFeed, get_change_feed
from app.services.geofence_monitor import GeofenceMonitor, get_monitor
from app.services.notification_service import NotificationService, get_notifications
from conftest import add_alert, add_boundary


@pytest.fixture
def monitor(session_factory):
    return GeofenceMonitor(session_factory=session_factory, notifier=NotificationService(),
                           feed=ChangeFeed(), interval_seconds=3600)


@pytest.fixture
def client(session_factory, monitor):
    app = FastAPI()
    for module in (geofence, map_settings, fleet, volunteers, notifications):
        app.include_router(module.router, prefix="/api/v1")

    def override_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_monitor] = lambda: monitor
    app.dependency_overrides[get_change_feed] = lambda: monitor.feed
    app.dependency_overrides[get_notifications] = lambda: monitor.notifier
    return TestClient(app)


class TestAlertEndpoints:
    def test_acknowledge_flow(self, client, db):
        alert = add_alert(db)

        resp = client.post("/api/v1/geofence/alerts/refetch")
        assert [a["id"] for a in resp.json()] == [alert.id]

        resp = client.put(f"/api/v1/geofence/alerts/{alert.id}/acknowledge")
        assert resp.status_code == 200
        assert resp.json() == {"id": alert.id, "status": "acknowledged"}
        assert client.get("/api/v1/geofence/alerts").json() == []

        resp = client.put(f"/api/v1/geofence/alerts/{alert.id}/resolve")
        assert resp.status_code == 409

    def test_unknown_alert_404(self, client):
        assert client.put("/api/v1/geofence/alerts/999/resolve").status_code == 404

    def test_history_includes_handled_alerts(self, client, db):
        add_alert(db, entity_id="1", status="resolved")
        add_alert(db, entity_id="2")
        resp = client.get("/api/v1/geofence/alerts/history", params={"status": "resolved"})
        assert [a["entity_id"] for a in resp.json()] == ["1"]

    def test_notifications_feed(self, client, db):
        alert = add_alert(db)
        client.put(f"/api/v1/geofence/alerts/{alert.id}/resolve")
        resp = client.get("/api/v1/notifications")
        assert resp.json()[0]["message"] == "Alert resolved"
        assert resp.json()[0]["level"] == "success"


class TestGeofenceEndpoints:
    def test_contains(self, client, db):
        add_boundary(db)
        assert client.get("/api/v1/geofence/contains", params={"lat": 12.9, "lng": 77.5}).json()["inside"] is True
        assert client.get("/api/v1/geofence/contains", params={"lat": 12.5, "lng": 77.5}).json()["inside"] is False

    def test_sweep_while_disabled(self, client):
        resp = client.post("/api/v1/geofence/sweep")
        assert resp.json()["skipped"] == "disabled"

    def test_status(self, client):
        body = client.get("/api/v1/geofence/status").json()
        assert body["enabled"] is False
        assert body["interval_seconds"] == 3600


class TestMapSettings:
    def test_defaults_seeded_on_read(self, client):
        body = client.get("/api/v1/map-settings").json()
        assert body["bounds_sw_lat"] == 12.7
        assert body["bounds_ne_lng"] == 77.9

    def test_update_boundary(self, client):
        resp = client.put("/api/v1/map-settings", json={
            "boundary": {"southwest": {"lat": 10, "lng": 10}, "northeast": {"lat": 20, "lng": 20}},
        })
        assert resp.status_code == 200
        assert (resp.json()["bounds_sw_lat"], resp.json()["bounds_ne_lng"]) == (10, 20)

    def test_clear_boundary(self, client):
        resp = client.put("/api/v1/map-settings", json={"boundary": None})
        assert resp.json()["bounds_sw_lat"] is None
        assert client.get("/api/v1/geofence/contains", params={"lat": -80, "lng": 10}).json()["inside"] is True

    def test_antimeridian_boundary_rejected(self, client):
        resp = client.put("/api/v1/map-settings", json={
            "boundary": {"southwest": {"lat": -20, "lng": 170}, "northeast": {"lat": -10, "lng": -170}},
        })
        assert resp.status_code == 422

    def test_view_fields_only(self, client):
        resp = client.put("/api/v1/map-settings", json={"zoom_level": 14})
        assert resp.json()["zoom_level"] == 14
        assert resp.json()["bounds_sw_lat"] == 12.7


class TestFleetAndVolunteers:
    def test_register_and_move_vehicle(self, client):
        resp = client.post("/api/v1/fleet/vehicles", json={"vehicle_number": "KA-01", "status": "in_use"})
        vehicle_id = resp.json()["id"]

        resp = client.put(f"/api/v1/fleet/vehicles/{vehicle_id}/location",
                          json={"location": {"lat": 12.9, "lng": 77.5}})
        assert resp.json()["current_location"] == {"lat": 12.9, "lng": 77.5}

        resp = client.put(f"/api/v1/fleet/vehicles/{vehicle_id}/location", json={"location": None})
        assert resp.json()["current_location"] is None

    def test_duplicate_vehicle_rejected(self, client):
        client.post("/api/v1/fleet/vehicles", json={"vehicle_number": "KA-01"})
        assert client.post("/api/v1/fleet/vehicles", json={"vehicle_number": "KA-01"}).status_code == 400

    def test_bad_coordinates_rejected(self, client):
        resp = client.post("/api/v1/fleet/vehicles", json={"vehicle_number": "KA-02"})
        resp = client.put(f"/api/v1/fleet/vehicles/{resp.json()['id']}/location",
                          json={"location": {"lat": 123, "lng": 77.5}})
        assert resp.status_code == 422

    def test_complete_assignment(self, client):
        resp = client.post("/api/v1/volunteers/assignments", json={"volunteer_id": "vol-1", "status": "en_route"})
        assignment_id = resp.json()["id"]
        resp = client.put(f"/api/v1/volunteers/assignments/{assignment_id}/status", json={"status": "completed"})
        assert resp.json()["status"] == "completed"
        assert resp.json()["completed_at"] is not None
