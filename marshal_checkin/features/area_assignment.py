"""
Area membership maintenance for event checkpoints.

Locations store the ids of the areas they fall in. Whenever an area is
added, reshaped or removed, the membership of every checkpoint in the
event is recomputed here.
"""

import uuid
from typing import List, Optional
from marshal_checkin.core.areas import calculate_checkpoint_areas
from marshal_checkin.core.models import Area, Location
from marshal_checkin.ports.repository import EventStorePort
from marshal_checkin.settings import AreaConfig
from marshal_checkin.observability import metrics
from marshal_checkin.observability.logging_setup import get_logger

log = get_logger("checkin.areas")

async def ensure_default_area(store: EventStorePort, event_id: str,
                              config: Optional[AreaConfig] = None) -> Area:
    """
    Return the event's default area, creating it when missing.

    Args:
        store: event store
        event_id: event id
        config: default area naming

    Returns:
        The default area
    """
    config = config or AreaConfig()
    area = await store.get_default_area(event_id)
    if area is not None:
        return area

    area = Area(
        id=str(uuid.uuid4()),
        event_id=event_id,
        name=config.default_area_name,
        description=config.default_area_description,
        color=config.default_area_color,
        is_default=True,
        display_order=0,
    )
    await store.upsert_area(area)
    log.info(f"Created default area for event {event_id}")
    return area

async def assign_location_areas(store: EventStorePort, location: Location,
                                config: Optional[AreaConfig] = None) -> Location:
    """Compute the areas of a new or moved checkpoint and persist it."""
    default_area = await ensure_default_area(store, location.event_id, config)
    areas = await store.get_areas_by_event(location.event_id)

    updated = location.model_copy(update={
        "area_ids": calculate_checkpoint_areas(
            location.latitude, location.longitude, areas, default_area.id
        )
    })
    await store.upsert_location(updated)
    return updated

async def recalculate_location_areas(store: EventStorePort, event_id: str,
                                     config: Optional[AreaConfig] = None) -> List[Location]:
    """
    Recompute area membership for every checkpoint of an event.

    Areas and locations are loaded once; only locations whose membership
    changed are written back.

    Args:
        store: event store
        event_id: event id
        config: default area naming

    Returns:
        The locations that were updated
    """
    default_area = await ensure_default_area(store, event_id, config)
    areas = await store.get_areas_by_event(event_id)
    locations = await store.get_locations_by_event(event_id)

    changed: List[Location] = []
    for location in locations:
        area_ids = calculate_checkpoint_areas(
            location.latitude, location.longitude, areas, default_area.id
        )
        if area_ids == location.area_ids:
            continue
        updated = location.model_copy(update={"area_ids": area_ids})
        await store.upsert_location(updated)
        changed.append(updated)

    if changed:
        metrics.area_recalculations.inc(len(changed))
    log.info(f"Recalculated areas for event {event_id}: "
             f"{len(changed)} of {len(locations)} checkpoints changed")
    return changed
