"""
Sighting queries against the Firestore sightings collection.
"""
import asyncio
import logging
from typing import Optional
from google.cloud import firestore

from ..config import BATCH_SIZE, DEFAULT_PAGE_LIMIT, SIGHTINGS_COLLECTION
from ..exceptions import ServiceUnavailableError
from ..models.sighting import PetSighting
from ..utils.geo_helpers import is_within_bounds
from .. import gcp_clients

logger = logging.getLogger(__name__)


class SightingService:
    """Service for listing pet sightings in Firestore."""
    
    def __init__(self, firestore_client=None):
        """
        Initialize sighting service.
        
        Args:
            firestore_client: Firestore client (or None to use global client)
        """
        self.firestore = firestore_client or gcp_clients.firestore_client
        self.collection_name = SIGHTINGS_COLLECTION
    
    def get_sightings(self, pet_id: str, bounds: Optional[dict] = None,
                      cursor: Optional[str] = None, limit: int = DEFAULT_PAGE_LIMIT) -> dict:
        """
        Page through a pet's sightings, newest first.
        
        Args:
            pet_id: Pet whose sightings to list
            bounds: Optional dict with 'north', 'south', 'east', 'west' keys
            cursor: Optional document ID to start after (for pagination)
            limit: Maximum number of results to return
            
        Returns:
            dict: Contains 'data' (list of sightings) and 'next_cursor'
            
        Raises:
            ServiceUnavailableError: If Firestore client is not initialized
        """
        if not self.firestore:
            raise ServiceUnavailableError("Firestore")
        
        query = self._build_query(pet_id)
        
        if cursor:
            cursor_doc = self.firestore.collection(self.collection_name).document(cursor).get()
            if cursor_doc.exists:
                query = query.start_after(cursor_doc)
        
        sightings = []
        last_scanned_doc = None
        
        # Deep scan: keep pulling batches until the page is full, since the
        # bounds filter runs in memory and may reject a whole batch
        while len(sightings) < limit:
            docs = list(query.limit(BATCH_SIZE).stream())
            
            if not docs:
                break
            
            for doc in docs:
                last_scanned_doc = doc
                data = doc.to_dict() or {}
                
                if bounds and not self._is_within_bounds(data, bounds):
                    continue
                
                sightings.append(PetSighting.from_firestore_doc(doc.id, data).to_dict())
                
                if len(sightings) >= limit:
                    break
            
            if len(sightings) < limit:
                query = self._build_query(pet_id).start_after(docs[-1])
        
        next_cursor = last_scanned_doc.id if last_scanned_doc and len(sightings) == limit else None
        
        return {
            "data": sightings,
            "next_cursor": next_cursor
        }
    
    async def fetch_user_sightings(self, user_id: str) -> list[PetSighting]:
        """Sightings reported by a user, newest first."""
        return await asyncio.to_thread(self._fetch_user_sightings, user_id)
    
    def _fetch_user_sightings(self, user_id: str) -> list[PetSighting]:
        if not self.firestore:
            raise ServiceUnavailableError("Firestore")
        
        query = self.firestore.collection(self.collection_name).where("reporterId", "==", user_id)
        query = query.order_by("sightingDate", direction=firestore.Query.DESCENDING)
        return [PetSighting.from_firestore_doc(doc.id, doc.to_dict() or {}) for doc in query.stream()]
    
    def _build_query(self, pet_id: str):
        """
        Build Firestore query for one pet's sightings.
        
        Args:
            pet_id: Pet document id
            
        Returns:
            Query: Firestore query object
        """
        query = self.firestore.collection(self.collection_name)
        query = query.where("petId", "==", pet_id)
        query = query.order_by("sightingDate", direction=firestore.Query.DESCENDING)
        return query
    
    def _is_within_bounds(self, sighting_data: dict, bounds: dict) -> bool:
        location = sighting_data.get("location")
        if not location:
            return False
        
        if isinstance(location, dict):
            lat, lng = location.get("latitude"), location.get("longitude")
        else:
            lat, lng = location.latitude, location.longitude
        
        if lat is None or lng is None:
            return False
        return is_within_bounds(lat, lng, **bounds)
