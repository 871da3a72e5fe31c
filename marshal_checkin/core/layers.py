"""
Route-proximity layer classification.

A checkpoint in auto mode belongs to every layer whose GPX route passes
within a set distance of it.
"""

from typing import Iterable, List
from marshal_checkin.core.models import Layer
from marshal_checkin.common.geo import distance_to_route_m

def find_layers_within_distance(
    latitude: float,
    longitude: float,
    layers: Iterable[Layer],
    distance_m: float
) -> List[str]:
    """
    Find the layers whose route passes near a checkpoint.

    Args:
        latitude: checkpoint latitude
        longitude: checkpoint longitude
        layers: all layers of the event
        distance_m: maximum distance from the route

    Returns:
        Ids of the layers within ``distance_m``, in input order; layers
        without a route never match
    """
    return [
        layer.id for layer in layers
        if layer.route and distance_to_route_m(latitude, longitude, layer.route) <= distance_m
    ]
