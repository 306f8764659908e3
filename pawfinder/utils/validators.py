"""
Input validation functions for the PawFinder application.
"""
import math
import re
from datetime import datetime, timezone
from typing import Optional
from werkzeug.datastructures import FileStorage

from ..config import (
    ALLOWED_IMAGE_EXTENSIONS, MAX_DESCRIPTION_LENGTH, MAX_IMAGE_SIZE_MB,
    MAX_SEARCH_RADIUS_KM, MIN_SEARCH_RADIUS_KM,
)
from ..exceptions import InvalidCoordinate, InvalidCriteria, ValidationError
from .geo_helpers import check_coordinate


def validate_coordinates(lat: Optional[str], lng: Optional[str]) -> tuple[float, float]:
    """
    Validate and convert latitude/longitude coordinates.
    
    Args:
        lat: Latitude value as string
        lng: Longitude value as string
        
    Returns:
        tuple: (latitude, longitude) as floats
        
    Raises:
        InvalidCoordinate: If coordinates are missing, non-numeric or out of range
    """
    if lat in (None, "") or lng in (None, ""):
        raise InvalidCoordinate("coordinates", "Latitude and longitude are required")
    
    try:
        lat_float = float(lat)
        lng_float = float(lng)
    except (ValueError, TypeError):
        raise InvalidCoordinate("coordinates", "Latitude and longitude must be numeric")
    
    check_coordinate(lat_float, lng_float)
    return lat_float, lng_float


def validate_radius(radius_km) -> float:
    """
    Validate a search radius in kilometers.
    
    Raises:
        InvalidCriteria: If the radius is not a number within the allowed bounds
    """
    try:
        radius = float(radius_km)
    except (ValueError, TypeError):
        raise InvalidCriteria("radius_km", f"Radius must be numeric, got {radius_km!r}")
    
    if math.isnan(radius) or not (MIN_SEARCH_RADIUS_KM <= radius <= MAX_SEARCH_RADIUS_KM):
        raise InvalidCriteria(
            "radius_km",
            f"Radius must be between {MIN_SEARCH_RADIUS_KM:g} and {MAX_SEARCH_RADIUS_KM:g} km, got {radius_km}"
        )
    return radius


def validate_date(date_str: Optional[str], field: str = "date") -> datetime:
    """
    Validate date string in YYYY-MM-DD format.
    
    Args:
        date_str: Date string to validate
        field: Field name reported on failure
        
    Returns:
        datetime: Midnight UTC of the given date, or now if None
        
    Raises:
        ValidationError: If date format is invalid
    """
    if not date_str:
        return datetime.now(timezone.utc)
    
    if not re.match(r'^\d{4}-\d{2}-\d{2}$', date_str):
        raise ValidationError(field, f"Date must be in YYYY-MM-DD format, got {date_str}")
    
    try:
        parsed = datetime.strptime(date_str, '%Y-%m-%d')
    except ValueError as e:
        raise ValidationError(field, f"Invalid date: {str(e)}")
    
    return parsed.replace(tzinfo=timezone.utc)


def validate_image(image_file: Optional[FileStorage], max_size_mb: int = MAX_IMAGE_SIZE_MB) -> FileStorage:
    """
    Validate uploaded image file.
    
    Args:
        image_file: Uploaded file from request
        max_size_mb: Maximum file size in megabytes
        
    Returns:
        FileStorage: Valid image file
        
    Raises:
        ValidationError: If image is invalid
    """
    if not image_file:
        raise ValidationError("image", "Image file is required")
    
    if not image_file.filename:
        raise ValidationError("image", "Image filename is missing")
    
    file_ext = '.' + image_file.filename.rsplit('.', 1)[-1].lower() if '.' in image_file.filename else ''
    
    if file_ext not in ALLOWED_IMAGE_EXTENSIONS:
        allowed = ', '.join(sorted(ALLOWED_IMAGE_EXTENSIONS))
        raise ValidationError("image", f"File type {file_ext} not allowed. Allowed types: {allowed}")
    
    image_file.seek(0, 2)
    file_size = image_file.tell()
    image_file.seek(0)
    
    max_size_bytes = max_size_mb * 1024 * 1024
    if file_size > max_size_bytes:
        raise ValidationError("image", f"File size ({file_size / 1024 / 1024:.2f}MB) exceeds maximum ({max_size_mb}MB)")
    
    if file_size == 0:
        raise ValidationError("image", "Image file is empty")
    
    return image_file


def validate_text(value: Optional[str], field: str = "description",
                  max_length: int = MAX_DESCRIPTION_LENGTH, required: bool = False) -> str:
    """
    Validate a free-text field.
    
    Args:
        value: User supplied text
        field: Field name reported on failure
        max_length: Maximum allowed length
        required: Whether an empty value is rejected
        
    Returns:
        str: Stripped text (empty string if None)
        
    Raises:
        ValidationError: If the text is missing when required or too long
    """
    value = (value or "").strip()
    
    if required and not value:
        raise ValidationError(field, f"{field} is required")
    
    if len(value) > max_length:
        raise ValidationError(field, f"{field} exceeds maximum length of {max_length} characters")
    
    return value


def validate_reward(reward: Optional[str]) -> Optional[float]:
    """
    Validate an optional reward amount.
    
    Returns:
        float or None: The reward, or None when not offered
        
    Raises:
        ValidationError: If the reward is not a non-negative number
    """
    if reward in (None, ""):
        return None
    
    try:
        amount = float(reward)
    except (ValueError, TypeError):
        raise ValidationError("reward", f"Reward must be numeric, got {reward!r}")
    
    if math.isnan(amount) or amount < 0:
        raise ValidationError("reward", f"Reward cannot be negative, got {reward}")
    
    return amount


def parse_flag(value: Optional[str]) -> bool:
    """Interpret a query-string flag such as 'true', '1' or 'yes'."""
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


def validate_bounds(north: Optional[float], south: Optional[float], 
                   east: Optional[float], west: Optional[float]) -> Optional[dict]:
    """
    Validate map bounds used to restrict sightings.
    
    Returns:
        dict: Validated bounds or None if all are None
        
    Raises:
        ValidationError: If bounds are partial or out of range
    """
    bounds_provided = [b is not None for b in [north, south, east, west]]
    
    if not any(bounds_provided):
        return None
    
    if not all(bounds_provided):
        raise ValidationError("bounds", "All bounds (north, south, east, west) must be provided together")
    
    for name, value, limit in (("north", north, 90), ("south", south, 90),
                               ("east", east, 180), ("west", west, 180)):
        if not (-limit <= value <= limit):
            raise ValidationError(name, f"{name.capitalize()} must be between -{limit} and {limit}, got {value}")
    
    if south > north:
        raise ValidationError("bounds", f"South latitude ({south}) cannot be greater than north latitude ({north})")
    
    return {
        "north": north,
        "south": south,
        "east": east,
        "west": west
    }
