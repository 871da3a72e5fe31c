"""
SQLite-based event store for the marshal check-in service.

Each entity lives in its own table keyed by (event_id, id), mirroring
the partition/row layout of a key-value table store. List-valued fields
are stored as JSON text and decoded by ``codec``.
"""

import aiosqlite
from datetime import datetime
from typing import List, Optional
from marshal_checkin.core.models import Area, Assignment, EventRole, Layer, Location, Marshal
from marshal_checkin.adapters.storage.codec import (
    decode_id_list, decode_polygon, encode_id_list, encode_polygon,
)
from marshal_checkin.observability.logging_setup import get_logger

log = get_logger("checkin.store")

SCHEMA = """
CREATE TABLE IF NOT EXISTS areas (
    event_id TEXT NOT NULL,
    id TEXT NOT NULL,
    name TEXT NOT NULL DEFAULT '',
    description TEXT NOT NULL DEFAULT '',
    color TEXT NOT NULL DEFAULT '',
    polygon_json TEXT NOT NULL DEFAULT '[]',
    is_default INTEGER NOT NULL DEFAULT 0,
    display_order INTEGER NOT NULL DEFAULT 0,
    PRIMARY KEY (event_id, id)
);
CREATE TABLE IF NOT EXISTS layers (
    event_id TEXT NOT NULL,
    id TEXT NOT NULL,
    name TEXT NOT NULL DEFAULT '',
    display_order INTEGER NOT NULL DEFAULT 0,
    route_json TEXT NOT NULL DEFAULT '[]',
    route_color TEXT NOT NULL DEFAULT '',
    PRIMARY KEY (event_id, id)
);
CREATE TABLE IF NOT EXISTS locations (
    event_id TEXT NOT NULL,
    id TEXT NOT NULL,
    name TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    latitude REAL NOT NULL DEFAULT 0,
    longitude REAL NOT NULL DEFAULT 0,
    area_ids_json TEXT NOT NULL DEFAULT '[]',
    what3words TEXT NOT NULL DEFAULT '',
    checked_in_count INTEGER NOT NULL DEFAULT 0,
    layer_ids_json TEXT NOT NULL DEFAULT '[]',
    layer_assignment_mode TEXT NOT NULL DEFAULT 'auto',
    PRIMARY KEY (event_id, id)
);
CREATE TABLE IF NOT EXISTS assignments (
    event_id TEXT NOT NULL,
    id TEXT NOT NULL,
    marshal_id TEXT NOT NULL,
    location_id TEXT NOT NULL,
    is_checked_in INTEGER NOT NULL DEFAULT 0,
    check_in_time TEXT,
    check_in_method TEXT NOT NULL DEFAULT '',
    check_in_latitude REAL,
    check_in_longitude REAL,
    PRIMARY KEY (event_id, id)
);
CREATE TABLE IF NOT EXISTS marshals (
    event_id TEXT NOT NULL,
    id TEXT NOT NULL,
    name TEXT NOT NULL,
    person_id TEXT,
    email TEXT NOT NULL DEFAULT '',
    phone_number TEXT NOT NULL DEFAULT '',
    PRIMARY KEY (event_id, id)
);
CREATE TABLE IF NOT EXISTS event_roles (
    event_id TEXT NOT NULL,
    id TEXT NOT NULL,
    person_id TEXT NOT NULL,
    role TEXT NOT NULL,
    area_ids_json TEXT NOT NULL DEFAULT '[]',
    PRIMARY KEY (event_id, id)
);
CREATE INDEX IF NOT EXISTS idx_assignments_marshal ON assignments(event_id, marshal_id);
"""

def _area(row) -> Area:
    return Area(
        id=row["id"],
        event_id=row["event_id"],
        name=row["name"],
        description=row["description"],
        color=row["color"],
        polygon=decode_polygon(row["polygon_json"]),
        is_default=bool(row["is_default"]),
        display_order=row["display_order"],
    )

def _layer(row) -> Layer:
    return Layer(
        id=row["id"],
        event_id=row["event_id"],
        name=row["name"],
        display_order=row["display_order"],
        route=decode_polygon(row["route_json"]),
        route_color=row["route_color"],
    )

def _location(row) -> Location:
    return Location(
        id=row["id"],
        event_id=row["event_id"],
        name=row["name"],
        description=row["description"],
        latitude=row["latitude"],
        longitude=row["longitude"],
        area_ids=decode_id_list(row["area_ids_json"]),
        what3words=row["what3words"],
        checked_in_count=row["checked_in_count"],
        layer_ids=decode_id_list(row["layer_ids_json"]),
        layer_assignment_mode=row["layer_assignment_mode"],
    )

def _assignment(row) -> Assignment:
    check_in_time = row["check_in_time"]
    return Assignment(
        id=row["id"],
        event_id=row["event_id"],
        marshal_id=row["marshal_id"],
        location_id=row["location_id"],
        is_checked_in=bool(row["is_checked_in"]),
        check_in_time=datetime.fromisoformat(check_in_time) if check_in_time else None,
        check_in_method=row["check_in_method"],
        check_in_latitude=row["check_in_latitude"],
        check_in_longitude=row["check_in_longitude"],
    )

def _marshal(row) -> Marshal:
    return Marshal(
        id=row["id"],
        event_id=row["event_id"],
        name=row["name"],
        person_id=row["person_id"],
        email=row["email"],
        phone_number=row["phone_number"],
    )

def _event_role(row) -> EventRole:
    return EventRole(
        id=row["id"],
        event_id=row["event_id"],
        person_id=row["person_id"],
        role=row["role"],
        area_ids=decode_id_list(row["area_ids_json"]),
    )

class SQLiteEventStore:
    """SQLite implementation of ``EventStorePort``"""

    def __init__(self, path: str):
        """
        Initialize the store.

        Args:
            path: SQLite database file path
        """
        self.path = path
        log.info(f"SQLiteEventStore initialized: {path}")

    async def init(self) -> None:
        """Create tables if they do not exist."""
        async with aiosqlite.connect(self.path) as db:
            await db.executescript(SCHEMA)
            await db.commit()
        log.info("SQLiteEventStore schema ready")

    async def _fetch_all(self, sql: str, params: tuple) -> List[aiosqlite.Row]:
        async with aiosqlite.connect(self.path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(sql, params) as cursor:
                return list(await cursor.fetchall())

    async def _fetch_one(self, sql: str, params: tuple) -> Optional[aiosqlite.Row]:
        async with aiosqlite.connect(self.path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(sql, params) as cursor:
                return await cursor.fetchone()

    async def _write(self, sql: str, params: tuple) -> None:
        try:
            async with aiosqlite.connect(self.path) as db:
                await db.execute(sql, params)
                await db.commit()
        except aiosqlite.Error as e:
            log.error(f"SQLiteEventStore write failed: {e}")
            raise

    # ---- collections per event ----

    async def get_areas_by_event(self, event_id: str) -> List[Area]:
        rows = await self._fetch_all(
            "SELECT * FROM areas WHERE event_id = ? ORDER BY display_order, id", (event_id,)
        )
        return [_area(r) for r in rows]

    async def get_layers_by_event(self, event_id: str) -> List[Layer]:
        rows = await self._fetch_all(
            "SELECT * FROM layers WHERE event_id = ? ORDER BY display_order, id", (event_id,)
        )
        return [_layer(r) for r in rows]

    async def get_locations_by_event(self, event_id: str) -> List[Location]:
        rows = await self._fetch_all(
            "SELECT * FROM locations WHERE event_id = ? ORDER BY id", (event_id,)
        )
        return [_location(r) for r in rows]

    async def get_assignments_by_event(self, event_id: str) -> List[Assignment]:
        rows = await self._fetch_all(
            "SELECT * FROM assignments WHERE event_id = ? ORDER BY id", (event_id,)
        )
        return [_assignment(r) for r in rows]

    async def get_marshals_by_event(self, event_id: str) -> List[Marshal]:
        rows = await self._fetch_all(
            "SELECT * FROM marshals WHERE event_id = ? ORDER BY name, id", (event_id,)
        )
        return [_marshal(r) for r in rows]

    async def get_event_roles_by_event(self, event_id: str) -> List[EventRole]:
        rows = await self._fetch_all(
            "SELECT * FROM event_roles WHERE event_id = ? ORDER BY id", (event_id,)
        )
        return [_event_role(r) for r in rows]

    # ---- single entities ----

    async def get_default_area(self, event_id: str) -> Optional[Area]:
        row = await self._fetch_one(
            "SELECT * FROM areas WHERE event_id = ? AND is_default = 1 LIMIT 1", (event_id,)
        )
        return _area(row) if row else None

    async def get_location(self, event_id: str, location_id: str) -> Optional[Location]:
        row = await self._fetch_one(
            "SELECT * FROM locations WHERE event_id = ? AND id = ?", (event_id, location_id)
        )
        return _location(row) if row else None

    async def get_assignment(self, event_id: str, assignment_id: str) -> Optional[Assignment]:
        row = await self._fetch_one(
            "SELECT * FROM assignments WHERE event_id = ? AND id = ?", (event_id, assignment_id)
        )
        return _assignment(row) if row else None

    # ---- writes ----

    async def upsert_area(self, area: Area) -> None:
        await self._write(
            "INSERT OR REPLACE INTO areas "
            "(event_id, id, name, description, color, polygon_json, is_default, display_order) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (area.event_id, area.id, area.name, area.description, area.color,
             encode_polygon(area.polygon), int(area.is_default), area.display_order),
        )

    async def upsert_layer(self, layer: Layer) -> None:
        await self._write(
            "INSERT OR REPLACE INTO layers "
            "(event_id, id, name, display_order, route_json, route_color) VALUES (?, ?, ?, ?, ?, ?)",
            (layer.event_id, layer.id, layer.name, layer.display_order,
             encode_polygon(layer.route), layer.route_color),
        )

    async def upsert_location(self, location: Location) -> None:
        await self._write(
            "INSERT OR REPLACE INTO locations "
            "(event_id, id, name, description, latitude, longitude, area_ids_json, "
            "what3words, checked_in_count, layer_ids_json, layer_assignment_mode) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (location.event_id, location.id, location.name, location.description,
             location.latitude, location.longitude, encode_id_list(location.area_ids),
             location.what3words, location.checked_in_count,
             encode_id_list(location.layer_ids), location.layer_assignment_mode),
        )

    async def upsert_assignment(self, assignment: Assignment) -> None:
        check_in_time = assignment.check_in_time.isoformat() if assignment.check_in_time else None
        await self._write(
            "INSERT OR REPLACE INTO assignments "
            "(event_id, id, marshal_id, location_id, is_checked_in, check_in_time, "
            "check_in_method, check_in_latitude, check_in_longitude) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (assignment.event_id, assignment.id, assignment.marshal_id, assignment.location_id,
             int(assignment.is_checked_in), check_in_time, assignment.check_in_method,
             assignment.check_in_latitude, assignment.check_in_longitude),
        )

    async def upsert_marshal(self, marshal: Marshal) -> None:
        await self._write(
            "INSERT OR REPLACE INTO marshals "
            "(event_id, id, name, person_id, email, phone_number) VALUES (?, ?, ?, ?, ?, ?)",
            (marshal.event_id, marshal.id, marshal.name, marshal.person_id,
             marshal.email, marshal.phone_number),
        )

    async def upsert_event_role(self, role: EventRole) -> None:
        await self._write(
            "INSERT OR REPLACE INTO event_roles "
            "(event_id, id, person_id, role, area_ids_json) VALUES (?, ?, ?, ?, ?)",
            (role.event_id, role.id, role.person_id, role.role, encode_id_list(role.area_ids)),
        )

    # ---- deletes ----

    async def _delete(self, sql: str, params: tuple) -> int:
        try:
            async with aiosqlite.connect(self.path) as db:
                cursor = await db.execute(sql, params)
                await db.commit()
                return cursor.rowcount
        except aiosqlite.Error as e:
            log.error(f"SQLiteEventStore delete failed: {e}")
            raise

    async def delete_assignments_for_location(self, event_id: str, location_id: str) -> int:
        return await self._delete(
            "DELETE FROM assignments WHERE event_id = ? AND location_id = ?", (event_id, location_id)
        )

    async def delete_assignments_by_event(self, event_id: str) -> int:
        return await self._delete("DELETE FROM assignments WHERE event_id = ?", (event_id,))

    async def delete_locations_by_event(self, event_id: str) -> int:
        return await self._delete("DELETE FROM locations WHERE event_id = ?", (event_id,))

    async def count(self, table: str, event_id: str) -> int:
        """
        Count rows of one entity table for an event.

        Args:
            table: one of the entity table names
            event_id: event id

        Returns:
            Row count
        """
        if table not in ("areas", "layers", "locations", "assignments", "marshals", "event_roles"):
            raise ValueError(f"unknown table: {table}")
        row = await self._fetch_one(f"SELECT COUNT(*) AS n FROM {table} WHERE event_id = ?", (event_id,))
        return row["n"] if row else 0
