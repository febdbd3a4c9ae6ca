# Geographic helpers for radius search
import math

EARTH_RADIUS_KM = 6371.0088


def haversine_km(lat1, lng1, lat2, lng2):
    """Great-circle distance in kilometres between two WGS84 points"""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))


def bounding_box(lat, lng, radius_km):
    """
    Lat/lng rectangle that contains every point within radius_km.

    Used as a coarse SQL pre-filter before the exact haversine check.
    Returns (min_lat, max_lat, min_lng, max_lng).
    """
    d_lat = math.degrees(radius_km / EARTH_RADIUS_KM)
    min_lat = max(lat - d_lat, -90.0)
    max_lat = min(lat + d_lat, 90.0)

    # Near the poles (or for huge radii) every longitude qualifies
    if max_lat >= 90.0 or min_lat <= -90.0 or radius_km >= EARTH_RADIUS_KM:
        return min_lat, max_lat, -180.0, 180.0

    d_lng = math.degrees(radius_km / (EARTH_RADIUS_KM * math.cos(math.radians(lat))))
    # Boxes crossing the antimeridian fall back to the full longitude range
    if lng - d_lng < -180.0 or lng + d_lng > 180.0:
        return min_lat, max_lat, -180.0, 180.0
    return min_lat, max_lat, lng - d_lng, lng + d_lng
