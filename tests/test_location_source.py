"""Unit tests for the entity location source."""

import pytest
from app.services.location_source import parse_position, list_tracked_entities
from conftest import add_vehicle, add_volunteer


class TestParsePosition:
    def test_valid_position(self):
        assert parse_position({"lat": 12.9, "lng": 77.5}) == (12.9, 77.5)

    def test_numeric_strings_accepted(self):
        assert parse_position({"lat": "12.9", "lng": "77.5"}) == (12.9, 77.5)

    def test_zero_is_a_position(self):
        assert parse_position({"lat": 0, "lng": 0}) == (0.0, 0.0)

    @pytest.mark.parametrize("raw", [
        None,
        "12.9,77.5",
        {},
        {"lat": 12.9},
        {"lat": None, "lng": 77.5},
        {"lat": "north", "lng": 77.5},
        {"lat": float("nan"), "lng": 77.5},
        {"lat": 12.9, "lng": float("inf")},
        {"lat": 95, "lng": 77.5},
        {"lat": 12.9, "lng": -181},
    ])
    def test_unusable_positions(self, raw):
        assert parse_position(raw) is None


class TestListTrackedEntities:
    def test_only_active_statuses(self, db):
        add_vehicle(db, "KA-01", 12.9, 77.5, status="available")
        add_vehicle(db, "KA-02", 12.9, 77.5, status="in_use")
        add_vehicle(db, "KA-03", 12.9, 77.5, status="maintenance")
        add_volunteer(db, "vol-1", 12.9, 77.5, status="en_route")
        add_volunteer(db, "vol-2", 12.9, 77.5, status="idle")
        add_volunteer(db, "vol-3", 12.9, 77.5, status="completed")

        entities = list_tracked_entities(db)
        labels = sorted(e.label for e in entities)
        assert labels == ["KA-01 (ambulance)", "KA-02 (ambulance)", "Volunteer vol-1", "Volunteer vol-2"]

    def test_entities_without_position_dropped(self, db):
        add_vehicle(db, "KA-01", 12.9, 77.5)
        add_vehicle(db, "KA-02")
        add_volunteer(db, "vol-1")

        entities = list_tracked_entities(db)
        assert [e.label for e in entities] == ["KA-01 (ambulance)"]

    def test_entity_keys(self, db):
        vehicle = add_vehicle(db, "KA-01", 12.9, 77.5)
        volunteer = add_volunteer(db, "vol-1", 13.0, 77.6)

        by_type = {e.entity_type: e for e in list_tracked_entities(db)}
        assert by_type["vehicle"].key == ("vehicle", str(vehicle.id))
        assert by_type["volunteer"].key == ("volunteer", str(volunteer.id))
        assert (by_type["volunteer"].lat, by_type["volunteer"].lng) == (13.0, 77.6)
