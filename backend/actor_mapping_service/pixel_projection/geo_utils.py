# geo_utils.py
import math

EARTH_RADIUS_M = 6371000

def haversine_distance(lat1, lon1, lat2, lon2):
    """Great-circle distance in meters on a spherical Earth."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)

    a = math.sin(dphi/2)**2 + math.cos(phi1)*math.cos(phi2)*math.sin(dlambda/2)**2
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(a), math.sqrt(1-a))

def bearing_deg(lat1, lon1, lat2, lon2):
    """Initial bearing from point 1 to point 2, degrees clockwise from north."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dlambda = math.radians(lon2 - lon1)

    y = math.sin(dlambda) * math.cos(phi2)
    x = math.cos(phi1)*math.sin(phi2) - math.sin(phi1)*math.cos(phi2)*math.cos(dlambda)
    brng = math.degrees(math.atan2(y, x))
    return (brng + 360) % 360

def destination_point(lat, lon, bearing, distance_m):
    """Point reached from (lat, lon) after travelling distance_m along bearing."""
    delta = distance_m / EARTH_RADIUS_M
    theta = math.radians(bearing)
    phi1, lambda1 = math.radians(lat), math.radians(lon)

    phi2 = math.asin(
        math.sin(phi1)*math.cos(delta) + math.cos(phi1)*math.sin(delta)*math.cos(theta)
    )
    lambda2 = lambda1 + math.atan2(
        math.sin(theta)*math.sin(delta)*math.cos(phi1),
        math.cos(delta) - math.sin(phi1)*math.sin(phi2),
    )
    return math.degrees(phi2), math.degrees(lambda2)

def lerp_fraction(value, start, end):
    # zero-length segments collapse onto the start point
    span = end - start
    return (value - start) / span if span > 0 else 0.0
