"""
Geographic utilities for the marshal check-in service.

This module provides the geometry used by area assignment and GPS
check-in: great-circle distance, radius checks, point-in-polygon
testing and distance from a point to a route.
"""

import math
from typing import Optional, Sequence
from marshal_checkin.core.models import Point

EARTH_RADIUS_M = 6371000.0

def haversine_distance_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate the haversine distance between two points in metres.

    Args:
        lat1: latitude of the first point
        lon1: longitude of the first point
        lat2: latitude of the second point
        lon2: longitude of the second point

    Returns:
        Distance in metres, exactly 0.0 for identical points
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = lat2_rad - lat1_rad
    dlon = math.radians(lon2 - lon1)

    a = (math.sin(dlat / 2) ** 2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2)
    # rounding can push a marginally outside [0, 1]
    a = min(1.0, max(0.0, a))
    c = 2 * math.asin(math.sqrt(a))

    return EARTH_RADIUS_M * c

def is_within_radius(lat1: float, lon1: float, lat2: float, lon2: float, radius_m: float) -> bool:
    """True when the two points are at most ``radius_m`` metres apart."""
    return haversine_distance_m(lat1, lon1, lat2, lon2) <= radius_m

def point_in_polygon(point: Point, polygon: Optional[Sequence[Point]]) -> bool:
    """
    Check whether a point lies inside a polygon using ray casting.

    The ray runs along the latitude axis; an edge is counted only when the
    point's longitude lies in the half-open interval spanned by the edge,
    so a ray passing through a shared vertex is counted once.

    Args:
        point: point to test
        polygon: polygon vertices, closure implicit

    Returns:
        True if the point is inside; always False for fewer than 3 vertices
    """
    if not polygon or len(polygon) < 3:
        return False

    x, y = point.latitude, point.longitude
    inside = False

    j = len(polygon) - 1
    for i in range(len(polygon)):
        xi, yi = polygon[i].latitude, polygon[i].longitude
        xj, yj = polygon[j].latitude, polygon[j].longitude
        if (yi > y) != (yj > y):
            x_cross = (xj - xi) * (y - yi) / (yj - yi) + xi
            if x < x_cross:
                inside = not inside
        j = i

    return inside

def distance_to_segment_m(lat: float, lon: float,
                          start_lat: float, start_lon: float,
                          end_lat: float, end_lon: float) -> float:
    """
    Distance in metres from a point to a route segment.

    The projection is done in degree space, which is accurate enough for
    the short segments of a GPX route.
    """
    dx = lon - start_lon
    dy = lat - start_lat
    sx = end_lon - start_lon
    sy = end_lat - start_lat

    seg_len_sq = sx * sx + sy * sy
    if seg_len_sq == 0:
        return haversine_distance_m(lat, lon, start_lat, start_lon)

    t = max(0.0, min(1.0, (dx * sx + dy * sy) / seg_len_sq))
    return haversine_distance_m(lat, lon, start_lat + t * sy, start_lon + t * sx)

def distance_to_route_m(lat: float, lon: float, route: Sequence[Point]) -> float:
    """
    Minimum distance in metres from a point to a polyline.

    Returns:
        ``math.inf`` for an empty route
    """
    if not route:
        return math.inf
    if len(route) == 1:
        return haversine_distance_m(lat, lon, route[0].latitude, route[0].longitude)

    return min(
        distance_to_segment_m(lat, lon, a.latitude, a.longitude, b.latitude, b.longitude)
        for a, b in zip(route, route[1:])
    )

def validate_coordinates(lat: float, lon: float) -> bool:
    """
    Check that coordinates are on the globe.

    Args:
        lat: latitude
        lon: longitude

    Returns:
        True if both values are within range
    """
    return -90 <= lat <= 90 and -180 <= lon <= 180
