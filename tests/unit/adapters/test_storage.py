"""
Storage adapter unit tests.

Covers the JSON column codec and the SQLite event store.
"""

import pytest
import os
from datetime import datetime, timezone
from marshal_checkin.adapters.storage.codec import (
    decode_id_list, decode_polygon, encode_id_list, encode_polygon,
)
from marshal_checkin.adapters.storage.sqlite_store import SQLiteEventStore
from marshal_checkin.core.models import (
    LAYER_MODE_MANUAL, ROLE_EVENT_AREA_LEAD, Area, Assignment, EventRole, Layer, Location, Marshal, Point,
)


class TestCodec:
    """JSON column codec"""

    @pytest.mark.parametrize("text", [None, "", "   ", "[]", "not json", "{\"a\": 1}", "42"])
    def test_lenient_empty_results(self, text):
        """Empty, malformed or non-list JSON decodes to an empty list"""
        assert decode_polygon(text) == []
        assert decode_id_list(text) == []

    def test_decode_polygon_long_keys(self):
        polygon = decode_polygon('[{"latitude": 53.1, "longitude": -1.2}, {"latitude": 53.2, "longitude": -1.3}]')
        assert polygon == [Point(latitude=53.1, longitude=-1.2), Point(latitude=53.2, longitude=-1.3)]

    def test_decode_polygon_short_keys(self):
        """Short lat/lng keys are accepted"""
        assert decode_polygon('[{"lat": 1, "lng": 2}, {"lat": 3, "lon": 4}]') == [
            Point(latitude=1, longitude=2), Point(latitude=3, longitude=4),
        ]

    def test_decode_polygon_skips_bad_vertices(self):
        """Vertices without usable coordinates are dropped"""
        text = '[{"lat": 1, "lng": 2}, {"lat": "x", "lng": 2}, {"foo": 1}, 7, {"lat": 5, "lng": 6}]'
        assert decode_polygon(text) == [Point(latitude=1, longitude=2), Point(latitude=5, longitude=6)]

    def test_polygon_encode_decode(self):
        polygon = [Point(latitude=1.5, longitude=-2.5), Point(latitude=3, longitude=4)]
        assert decode_polygon(encode_polygon(polygon)) == polygon

    def test_id_list(self):
        assert decode_id_list(encode_id_list(["a", "b"])) == ["a", "b"]
        assert decode_id_list('["a", 2, null, {"x": 1}]') == ["a", "2"]


class TestSQLiteEventStore:
    """SQLite event store"""

    @pytest.mark.asyncio
    async def test_store_initialization(self, store, temp_db_path):
        """Schema is created on init"""
        assert store.path == temp_db_path
        assert os.path.exists(temp_db_path)

    @pytest.mark.asyncio
    async def test_init_is_idempotent(self, store):
        await store.init()
        assert await store.count("areas", "evt") == 0

    @pytest.mark.asyncio
    async def test_area_round_trip(self, store):
        """Polygons survive storage"""
        area = Area(id="a1", event_id="evt", name="North", color="#ff0000",
                    polygon=[Point(latitude=0, longitude=0), Point(latitude=1, longitude=0),
                             Point(latitude=1, longitude=1)],
                    display_order=2)
        default = Area(id="a0", event_id="evt", name="Unassigned", is_default=True)
        await store.upsert_area(area)
        await store.upsert_area(default)

        areas = await store.get_areas_by_event("evt")
        assert [a.id for a in areas] == ["a0", "a1"]
        assert areas[1] == area
        assert await store.get_default_area("evt") == default
        assert await store.get_default_area("other") is None

    @pytest.mark.asyncio
    async def test_location_round_trip(self, store):
        location = Location(id="l1", event_id="evt", name="23", description="Acaster Selby T-junction",
                            latitude=53.867521, longitude=-1.130008, area_ids=["a1", "a2"],
                            what3words="look.forecast.dockers")
        await store.upsert_location(location)

        assert await store.get_location("evt", "l1") == location
        assert await store.get_location("evt", "missing") is None
        assert await store.get_locations_by_event("evt") == [location]

    @pytest.mark.asyncio
    async def test_upsert_replaces(self, store):
        """Writing the same id twice keeps the latest version"""
        await store.upsert_location(Location(id="l1", event_id="evt", name="old"))
        await store.upsert_location(Location(id="l1", event_id="evt", name="new", checked_in_count=3))

        locations = await store.get_locations_by_event("evt")
        assert len(locations) == 1
        assert locations[0].name == "new"
        assert locations[0].checked_in_count == 3

    @pytest.mark.asyncio
    async def test_assignment_round_trip(self, store):
        """Check-in time keeps its timezone"""
        when = datetime(2026, 5, 17, 8, 30, tzinfo=timezone.utc)
        assignment = Assignment(id="as1", event_id="evt", marshal_id="m1", location_id="l1",
                                is_checked_in=True, check_in_time=when, check_in_method="GPS",
                                check_in_latitude=53.8, check_in_longitude=-1.1)
        await store.upsert_assignment(assignment)

        loaded = await store.get_assignment("evt", "as1")
        assert loaded == assignment
        assert loaded.check_in_time.tzinfo is not None

    @pytest.mark.asyncio
    async def test_marshals_and_roles(self, store):
        await store.upsert_marshal(Marshal(id="m2", event_id="evt", name="Zed"))
        await store.upsert_marshal(Marshal(id="m1", event_id="evt", name="Amy", person_id="p1",
                                           email="amy@example.com", phone_number="07700"))
        await store.upsert_event_role(EventRole(id="r1", person_id="p1", event_id="evt",
                                                role=ROLE_EVENT_AREA_LEAD, area_ids=["a1"]))

        marshals = await store.get_marshals_by_event("evt")
        assert [m.name for m in marshals] == ["Amy", "Zed"]
        assert marshals[0].person_id == "p1"
        assert marshals[1].person_id is None

        roles = await store.get_event_roles_by_event("evt")
        assert roles[0].area_ids == ["a1"]

    @pytest.mark.asyncio
    async def test_events_are_isolated(self, store):
        """Collections are scoped to one event"""
        await store.upsert_location(Location(id="l1", event_id="evt-a", name="A"))
        await store.upsert_location(Location(id="l1", event_id="evt-b", name="B"))

        assert [l.name for l in await store.get_locations_by_event("evt-a")] == ["A"]
        assert await store.count("locations", "evt-b") == 1

    @pytest.mark.asyncio
    async def test_delete_assignments_for_location(self, store):
        for i, loc in enumerate(["l1", "l1", "l2"]):
            await store.upsert_assignment(Assignment(id=f"as{i}", event_id="evt",
                                                     marshal_id=f"m{i}", location_id=loc))

        removed = await store.delete_assignments_for_location("evt", "l1")

        assert removed == 2
        assert [a.location_id for a in await store.get_assignments_by_event("evt")] == ["l2"]

    @pytest.mark.asyncio
    async def test_delete_by_event(self, store):
        for event_id in ("evt", "keep"):
            await store.upsert_location(Location(id="l1", event_id=event_id, name="A"))
            await store.upsert_location(Location(id="l2", event_id=event_id, name="B"))
            await store.upsert_assignment(Assignment(id="as1", event_id=event_id,
                                                     marshal_id="m1", location_id="l1"))

        assert await store.delete_locations_by_event("evt") == 2
        assert await store.delete_assignments_by_event("evt") == 1

        assert await store.get_locations_by_event("evt") == []
        assert await store.get_assignments_by_event("evt") == []
        assert await store.count("locations", "keep") == 2
        assert await store.count("assignments", "keep") == 1

    @pytest.mark.asyncio
    async def test_layer_round_trip(self, store):
        layer = Layer(id="r1", event_id="evt", name="10k", display_order=2, route_color="#3388ff",
                      route=[Point(latitude=53.9, longitude=-1.09), Point(latitude=53.8, longitude=-1.1)])
        await store.upsert_layer(layer)
        await store.upsert_layer(Layer(id="r0", event_id="evt", display_order=1))

        layers = await store.get_layers_by_event("evt")

        assert [l.id for l in layers] == ["r0", "r1"]
        assert layers[1] == layer
        assert layers[0].route == []
        assert await store.count("layers", "evt") == 2

    @pytest.mark.asyncio
    async def test_location_layer_fields(self, store):
        location = Location(id="l1", event_id="evt", name="A", layer_ids=["r1", "r2"],
                            layer_assignment_mode=LAYER_MODE_MANUAL)
        await store.upsert_location(location)

        assert await store.get_location("evt", "l1") == location

    @pytest.mark.asyncio
    async def test_count_rejects_unknown_table(self, store):
        with pytest.raises(ValueError):
            await store.count("sqlite_master", "evt")

    @pytest.mark.asyncio
    async def test_damaged_json_column_reads_as_empty(self, store):
        """A malformed area_ids column does not break reads"""
        import aiosqlite
        await store.upsert_location(Location(id="l1", event_id="evt", name="A", area_ids=["x"]))
        async with aiosqlite.connect(store.path) as db:
            await db.execute("UPDATE locations SET area_ids_json = 'oops' WHERE id = 'l1'")
            await db.commit()

        location = await store.get_location("evt", "l1")
        assert location.area_ids == []

    @pytest.mark.asyncio
    async def test_write_errors_propagate(self, tmp_path):
        """Writes against a missing schema raise instead of being swallowed"""
        import aiosqlite
        bare = SQLiteEventStore(str(tmp_path / "bare.db"))
        with pytest.raises(aiosqlite.Error):
            await bare.upsert_marshal(Marshal(id="m1", event_id="evt", name="A"))
