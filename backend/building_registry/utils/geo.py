"""Coordinate bounds for building locations."""
from typing import Optional

# Country bounding box [min_lon, min_lat, max_lon, max_lat] (Poland, WGS84)
COUNTRY_BBOX = [14.1, 49.0, 24.1, 54.8]

LONGITUDE_MIN, LATITUDE_MIN, LONGITUDE_MAX, LATITUDE_MAX = COUNTRY_BBOX


def longitude_error(lon: float) -> Optional[str]:
    """Return a reason string if the longitude is outside the country, else None."""
    if not LONGITUDE_MIN <= lon <= LONGITUDE_MAX:
        return f"longitude must be between {LONGITUDE_MIN} and {LONGITUDE_MAX}"
    return None


def latitude_error(lat: float) -> Optional[str]:
    """Return a reason string if the latitude is outside the country, else None."""
    if not LATITUDE_MIN <= lat <= LATITUDE_MAX:
        return f"latitude must be between {LATITUDE_MIN} and {LATITUDE_MAX}"
    return None
