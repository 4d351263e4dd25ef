import math
from dataclasses import dataclass

EARTH_RADIUS_METERS = 6_371_000.0


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not -90 <= self.lat <= 90:
            raise ValueError(f"latitude out of range: {self.lat}")
        if not -180 <= self.lng <= 180:
            raise ValueError(f"longitude out of range: {self.lng}")


def haversine_meters(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points."""
    lat1, lat2 = math.radians(a.lat), math.radians(b.lat)
    dlat = lat2 - lat1
    dlng = math.radians(b.lng - a.lng)
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_METERS * math.asin(min(1.0, math.sqrt(h)))


def bounding_box(center: GeoPoint, radius_meters: float) -> tuple[float, float, float, float]:
    """(min_lat, max_lat, min_lng, max_lng) enclosing the circle; used as a coarse SQL pre-filter."""
    dlat = math.degrees(radius_meters / EARTH_RADIUS_METERS)
    min_lat = max(-90.0, center.lat - dlat)
    max_lat = min(90.0, center.lat + dlat)
    cos_lat = math.cos(math.radians(center.lat))
    # Near the poles every longitude is in range
    if cos_lat < 1e-9 or max_lat >= 90.0 or min_lat <= -90.0:
        return min_lat, max_lat, -180.0, 180.0
    dlng = math.degrees(radius_meters / (EARTH_RADIUS_METERS * cos_lat))
    min_lng, max_lng = center.lng - dlng, center.lng + dlng
    # Boxes crossing the antimeridian fall back to the full longitude range
    if min_lng < -180.0 or max_lng > 180.0:
        return min_lat, max_lat, -180.0, 180.0
    return min_lat, max_lat, min_lng, max_lng
