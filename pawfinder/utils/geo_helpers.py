"""
Geographic helpers: great-circle distance and bounding-box checks.
"""
import math

from ..config import EARTH_RADIUS_KM
from ..exceptions import InvalidCoordinate


def check_coordinate(lat: float, lng: float) -> None:
    """
    Raise InvalidCoordinate unless (lat, lng) is a finite in-range pair.
    
    Args:
        lat: Latitude in degrees
        lng: Longitude in degrees
        
    Raises:
        InvalidCoordinate: If either value is NaN, infinite or out of range
    """
    if lat is None or lng is None or math.isnan(lat) or math.isnan(lng):
        raise InvalidCoordinate("coordinates", f"Coordinates must be numeric, got ({lat}, {lng})")
    
    if not (-90 <= lat <= 90):
        raise InvalidCoordinate("latitude", f"Latitude must be between -90 and 90, got {lat}")
    
    if not (-180 <= lng <= 180):
        raise InvalidCoordinate("longitude", f"Longitude must be between -180 and 180, got {lng}")


def is_valid_coordinate(lat: float, lng: float) -> bool:
    """Return True if (lat, lng) would pass check_coordinate."""
    try:
        check_coordinate(lat, lng)
    except (InvalidCoordinate, TypeError):
        return False
    return True


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Great-circle distance between two points on a spherical Earth.
    
    Args:
        lat1: Latitude of the first point in degrees
        lng1: Longitude of the first point in degrees
        lat2: Latitude of the second point in degrees
        lng2: Longitude of the second point in degrees
        
    Returns:
        float: Distance in kilometers (never negative)
        
    Raises:
        InvalidCoordinate: If any coordinate is out of range
    """
    check_coordinate(lat1, lng1)
    check_coordinate(lat2, lng2)
    
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lng / 2) ** 2
    )
    # Rounding can push a fraction above 1 for antipodal points
    a = min(1.0, a)
    
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def bounding_box(lat: float, lng: float, radius_km: float) -> dict:
    """
    Conservative lat/lng box enclosing a circle around (lat, lng).
    
    The box may cross the dateline (west > east). Near the poles it widens
    to the full longitude range.
    
    Args:
        lat: Center latitude
        lng: Center longitude
        radius_km: Circle radius in kilometers
        
    Returns:
        dict: 'north', 'south', 'east', 'west' boundaries in degrees
    """
    check_coordinate(lat, lng)
    
    d_lat = math.degrees(radius_km / EARTH_RADIUS_KM)
    north = min(90.0, lat + d_lat)
    south = max(-90.0, lat - d_lat)
    
    cos_lat = math.cos(math.radians(lat))
    if north >= 90.0 or south <= -90.0 or cos_lat < 1e-6:
        return {"north": north, "south": south, "east": 180.0, "west": -180.0}
    
    # Longitude half-width at the circle's tangent points, which lie poleward of the center
    sin_extent = math.sin(radius_km / EARTH_RADIUS_KM) / cos_lat
    if sin_extent >= 1.0:
        return {"north": north, "south": south, "east": 180.0, "west": -180.0}
    d_lng = math.degrees(math.asin(sin_extent))
    
    east = lng + d_lng
    west = lng - d_lng
    if east > 180.0:
        east -= 360.0
    if west < -180.0:
        west += 360.0
    
    return {"north": north, "south": south, "east": east, "west": west}


def is_within_bounds(lat: float, lng: float, north: float, south: float, 
                    east: float, west: float) -> bool:
    """
    Check if coordinates are within geographic bounds.
    
    Args:
        lat: Latitude to check
        lng: Longitude to check
        north: Northern boundary
        south: Southern boundary
        east: Eastern boundary
        west: Western boundary
        
    Returns:
        bool: True if coordinates are within bounds
    """
    if not (south <= lat <= north):
        return False
    
    if west <= east:
        return west <= lng <= east
    else:
        # Crosses dateline (e.g., west=170, east=-170)
        return west <= lng or lng <= east
