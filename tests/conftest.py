"""
Test configuration and fixtures.

This module provides pytest configuration and shared fixtures.
"""

import pytest
import asyncio
import tempfile
import os
from marshal_checkin.settings import Settings
from marshal_checkin.core.models import (
    ROLE_EVENT_AREA_LEAD, Area, Assignment, EventRole, Location, Marshal, Point,
)
from marshal_checkin.adapters.storage.sqlite_store import SQLiteEventStore


@pytest.fixture
def temp_db_path():
    """Temporary database file path"""
    with tempfile.NamedTemporaryFile(suffix='.db', delete=False) as f:
        temp_path = f.name
    yield temp_path
    if os.path.exists(temp_path):
        os.unlink(temp_path)


@pytest.fixture
async def store(temp_db_path):
    """Initialized SQLite event store"""
    s = SQLiteEventStore(temp_db_path)
    await s.init()
    return s


@pytest.fixture
def sample_settings():
    """Settings for tests"""
    settings = Settings()
    settings.observability.service_name = "test-service"
    settings.observability.build_version = "1.0.0"
    settings.observability.log_level = "INFO"
    settings.observability.http_port = 8080
    return settings


@pytest.fixture
def square_polygon():
    """Unit square between (0, 0) and (10, 10)"""
    return [
        Point(latitude=0, longitude=0),
        Point(latitude=10, longitude=0),
        Point(latitude=10, longitude=10),
        Point(latitude=0, longitude=10),
    ]


@pytest.fixture
def event_snapshot():
    """
    Small event: two areas, three checkpoints, four marshals.

    - loc-north (area-north): m-alice, m-bob
    - loc-south (area-south): m-carol
    - loc-both (area-north, area-south): m-dave
    - p-bob leads area-north, p-carol leads area-south
    """
    event_id = "evt-1"
    areas = [
        Area(id="area-default", event_id=event_id, name="Unassigned", is_default=True),
        Area(id="area-north", event_id=event_id, name="North", display_order=1),
        Area(id="area-south", event_id=event_id, name="South", display_order=2),
    ]
    locations = [
        Location(id="loc-north", event_id=event_id, name="1", area_ids=["area-north"]),
        Location(id="loc-south", event_id=event_id, name="2", area_ids=["area-south"]),
        Location(id="loc-both", event_id=event_id, name="3", area_ids=["area-north", "area-south"]),
    ]
    marshals = [
        Marshal(id="m-alice", event_id=event_id, name="Alice", person_id="p-alice",
                email="alice@example.com", phone_number="0700 000001"),
        Marshal(id="m-bob", event_id=event_id, name="Bob", person_id="p-bob",
                email="bob@example.com", phone_number="0700 000002"),
        Marshal(id="m-carol", event_id=event_id, name="Carol", person_id="p-carol",
                email="carol@example.com", phone_number="0700 000003"),
        Marshal(id="m-dave", event_id=event_id, name="Dave", person_id=None,
                email="dave@example.com", phone_number="0700 000004"),
    ]
    assignments = [
        Assignment(id="a-1", event_id=event_id, marshal_id="m-alice", location_id="loc-north"),
        Assignment(id="a-2", event_id=event_id, marshal_id="m-bob", location_id="loc-north"),
        Assignment(id="a-3", event_id=event_id, marshal_id="m-carol", location_id="loc-south"),
        Assignment(id="a-4", event_id=event_id, marshal_id="m-dave", location_id="loc-both"),
    ]
    event_roles = [
        EventRole(id="r-1", person_id="p-bob", event_id=event_id,
                  role=ROLE_EVENT_AREA_LEAD, area_ids=["area-north"]),
        EventRole(id="r-2", person_id="p-carol", event_id=event_id,
                  role=ROLE_EVENT_AREA_LEAD, area_ids=["area-south"]),
    ]
    return {
        "event_id": event_id,
        "areas": areas,
        "locations": locations,
        "marshals": marshals,
        "assignments": assignments,
        "event_roles": event_roles,
    }


def pytest_configure(config):
    """pytest configuration"""
    config.addinivalue_line(
        "markers", "slow: slow tests"
    )
    config.addinivalue_line(
        "markers", "integration: tests touching a real SQLite file"
    )


def pytest_collection_modifyitems(config, items):
    """Tag collected tests"""
    for item in items:
        if asyncio.iscoroutinefunction(getattr(item, "function", None)):
            item.add_marker(pytest.mark.asyncio)

        if "performance" in item.name or "stress" in item.name:
            item.add_marker(pytest.mark.slow)

        if "integration" in item.name:
            item.add_marker(pytest.mark.integration)
