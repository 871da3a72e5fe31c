"""
Route-proximity layer maintenance for event checkpoints.

Checkpoints in auto mode carry the ids of the layers whose GPX route
passes near them. The membership is recomputed when a route changes or
checkpoints are imported; manual-mode checkpoints keep the layers an
organiser picked.
"""

from typing import List, Optional
from marshal_checkin.core.layers import find_layers_within_distance
from marshal_checkin.core.models import LAYER_MODE_AUTO, Layer, Location
from marshal_checkin.ports.repository import EventStorePort
from marshal_checkin.settings import LayerConfig
from marshal_checkin.observability import metrics
from marshal_checkin.observability.logging_setup import get_logger

log = get_logger("checkin.layers")

async def save_layer(store: EventStorePort, layer: Layer,
                     config: Optional[LayerConfig] = None) -> List[Location]:
    """
    Persist a layer and refresh auto-mode checkpoints when it has a route.

    Returns:
        The locations whose layers changed
    """
    await store.upsert_layer(layer)
    if not layer.route:
        return []
    return await recalculate_layer_assignments(store, layer.event_id, config)

async def recalculate_layer_assignments(store: EventStorePort, event_id: str,
                                        config: Optional[LayerConfig] = None) -> List[Location]:
    """
    Recompute route layers for every auto-mode checkpoint of an event.

    Layers and locations are loaded once; only locations whose layer list
    changed are written back.

    Args:
        store: event store
        event_id: event id
        config: route proximity distance

    Returns:
        The locations that were updated
    """
    config = config or LayerConfig()
    layers = await store.get_layers_by_event(event_id)
    locations = await store.get_locations_by_event(event_id)

    changed: List[Location] = []
    for location in locations:
        if location.layer_assignment_mode != LAYER_MODE_AUTO:
            continue
        layer_ids = find_layers_within_distance(
            location.latitude, location.longitude, layers, config.proximity_m
        )
        if layer_ids == location.layer_ids:
            continue
        updated = location.model_copy(update={"layer_ids": layer_ids})
        await store.upsert_location(updated)
        changed.append(updated)

    if changed:
        metrics.layer_recalculations.inc(len(changed))
    log.info(f"Recalculated layers for event {event_id}: "
             f"{len(changed)} of {len(locations)} checkpoints changed")
    return changed
