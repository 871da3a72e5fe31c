"""
Checkpoint area classification.

Decides which geographic areas a checkpoint belongs to. The result is
stored on the location when it is created or when areas change.
"""

from typing import Iterable, List
from marshal_checkin.core.models import Area, Point
from marshal_checkin.common.geo import point_in_polygon

def calculate_checkpoint_areas(
    latitude: float,
    longitude: float,
    areas: Iterable[Area],
    default_area_id: str
) -> List[str]:
    """
    Calculate the areas containing a checkpoint.

    Args:
        latitude: checkpoint latitude
        longitude: checkpoint longitude
        areas: all areas of the event
        default_area_id: fallback area for checkpoints outside every polygon

    Returns:
        Ids of every non-default area whose polygon contains the point, in
        input order, or ``[default_area_id]`` when there is none
    """
    point = Point(latitude=latitude, longitude=longitude)
    area_ids: List[str] = []

    for area in areas:
        # the default area is the fallback, never matched by polygon
        if area.is_default:
            continue
        if area.polygon and point_in_polygon(point, area.polygon):
            area_ids.append(area.id)

    if not area_ids:
        area_ids.append(default_area_id)

    return area_ids
