"""
Geocoding service for turning report coordinates into street addresses.
"""
import logging

from ..models.pet import LocationData
from .. import gcp_clients

logger = logging.getLogger(__name__)


class GeocodingService:
    """Service for reverse geocoding operations."""
    
    def __init__(self, gmaps_client=None):
        """
        Initialize geocoding service.
        
        Args:
            gmaps_client: Google Maps client (or None to use global client)
        """
        self.gmaps = gmaps_client or gcp_clients.gmaps
    
    def reverse_geocode(self, latitude: float, longitude: float, address: str = "") -> LocationData:
        """
        Get location details from coordinates.
        
        Failures are logged and leave the address fields as given, since a
        report is still useful without them.
        
        Args:
            latitude: Latitude coordinate
            longitude: Longitude coordinate
            address: Address typed by the user, kept if geocoding finds none
            
        Returns:
            LocationData: Location with address, city and state populated when known
        """
        location = LocationData(latitude=latitude, longitude=longitude, address=address)
        
        if not self.gmaps:
            logger.warning("Google Maps client not initialized, skipping geocoding")
            return location
        
        try:
            results = self.gmaps.reverse_geocode((latitude, longitude))
            
            if results:
                first = results[0]
                parsed = self._parse_address_components(first.get('address_components', []))
                
                location.address = address or first.get('formatted_address', '')
                location.city = parsed['city']
                location.state = parsed['state']
                
                logger.info(f"Geocoded ({latitude}, {longitude}) to {location.city}, {location.state}")
            else:
                logger.warning(f"No geocoding results for ({latitude}, {longitude})")
                
        except Exception as e:
            logger.error(f"Geocoding failed for ({latitude}, {longitude}): {e}")
        
        return location
    
    def _parse_address_components(self, components: list) -> dict:
        """
        Extract city and state from Google Maps address components.
        
        Args:
            components: List of address component dictionaries from Google Maps API
            
        Returns:
            dict: Parsed address with 'city' and 'state' keys
        """
        parsed = {'city': '', 'state': ''}
        
        for component in components:
            types = component.get('types', [])
            
            if 'locality' in types:
                parsed['city'] = component.get('long_name', '')
            elif 'administrative_area_level_1' in types:
                parsed['state'] = component.get('short_name') or component.get('long_name', '')
        
        return parsed
