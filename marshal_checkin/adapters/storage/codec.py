"""
JSON column codec for the table store.

List-valued fields (area polygons, area id lists) are persisted as JSON
text. Decoding is lenient: empty, ``"[]"`` or malformed text yields an
empty list, so a damaged row never breaks area classification.
"""

import json
from typing import List, Optional
from pydantic import ValidationError
from marshal_checkin.core.models import Point
from marshal_checkin.observability.logging_setup import get_logger

log = get_logger("checkin.codec")

def _load_list(text: Optional[str]) -> list:
    if not text or not text.strip():
        return []
    try:
        value = json.loads(text)
    except json.JSONDecodeError:
        log.warning(f"Unparseable JSON column ignored: {text[:80]!r}")
        return []
    return value if isinstance(value, list) else []

def decode_polygon(text: Optional[str]) -> List[Point]:
    """
    Decode a polygon stored as ``[{"latitude": .., "longitude": ..}, ...]``.

    The short ``lat``/``lng`` keys written by older clients are accepted.
    Vertices that cannot be read are skipped.
    """
    points: List[Point] = []
    for item in _load_list(text):
        if not isinstance(item, dict):
            continue
        lat = item.get("latitude", item.get("lat"))
        lon = item.get("longitude", item.get("lng", item.get("lon")))
        try:
            points.append(Point(latitude=lat, longitude=lon))
        except ValidationError:
            continue
    return points

def encode_polygon(points: List[Point]) -> str:
    return json.dumps([p.model_dump() for p in points])

def decode_id_list(text: Optional[str]) -> List[str]:
    return [str(v) for v in _load_list(text) if isinstance(v, (str, int))]

def encode_id_list(ids: List[str]) -> str:
    return json.dumps(list(ids))
