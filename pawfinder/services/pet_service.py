"""
Pet report gateway backed by the Firestore lostPets collection.
"""
import asyncio
import logging
import uuid
from typing import Optional
from google.cloud import firestore

from ..config import LOST_PETS_COLLECTION, SIGHTINGS_COLLECTION
from ..exceptions import FetchFailed, NotFoundError, ServiceUnavailableError
from ..models.pet import LostPet
from ..models.search import Coordinate
from ..models.sighting import PetSighting
from ..utils.geo_helpers import bounding_box, is_within_bounds
from .. import gcp_clients

logger = logging.getLogger(__name__)


class PetService:
    """
    Reads and writes lost pet reports.
    
    The Firestore client is blocking, so each call runs in a worker
    thread and the async methods never stall the event loop.
    """
    
    def __init__(self, firestore_client=None):
        """
        Initialize pet service.
        
        Args:
            firestore_client: Firestore client (or None to use global client)
        """
        self.firestore = firestore_client or gcp_clients.firestore_client
        self.collection_name = LOST_PETS_COLLECTION
    
    def _require_client(self):
        if not self.firestore:
            raise ServiceUnavailableError("Firestore")
        return self.firestore
    
    async def fetch_active_pets(self, center: Optional[Coordinate], radius_km: float) -> list[LostPet]:
        """
        Fetch active reports, roughly pre-filtered around a center.
        
        The bounding-box filter only trims obvious misses; callers must
        still apply the exact radius.
        
        Args:
            center: Search center, or None to fetch every active report
            radius_km: Advisory search radius
            
        Returns:
            list: Decoded LostPet reports
            
        Raises:
            FetchFailed: If Firestore is unavailable or the query fails
        """
        try:
            return await asyncio.to_thread(self._fetch_active_pets, center, radius_km)
        except ServiceUnavailableError as e:
            raise FetchFailed(str(e), cause=e)
        except Exception as e:
            logger.error(f"Failed to fetch active pets: {e}")
            raise FetchFailed(f"Failed to fetch active pets: {str(e)}", cause=e)
    
    def _fetch_active_pets(self, center: Optional[Coordinate], radius_km: float) -> list[LostPet]:
        client = self._require_client()
        query = client.collection(self.collection_name).where("isActive", "==", True)
        
        bounds = None
        if center is not None:
            bounds = bounding_box(center.latitude, center.longitude, radius_km)
        
        pets = []
        scanned = 0
        for doc in query.stream():
            scanned += 1
            pet = self._decode(doc)
            if pet is None:
                continue
            if bounds and pet.last_seen_location.has_valid_coordinate and not is_within_bounds(
                    pet.last_seen_location.latitude, pet.last_seen_location.longitude, **bounds):
                continue
            pets.append(pet)
        
        logger.info(f"Fetched {len(pets)} of {scanned} active pets")
        return pets
    
    def _decode(self, doc) -> Optional[LostPet]:
        try:
            return LostPet.from_firestore_doc(doc.id, doc.to_dict() or {})
        except (ValueError, TypeError) as e:
            logger.warning(f"Error decoding pet document {doc.id}: {e}")
            return None
    
    async def submit_sighting(self, sighting: PetSighting) -> str:
        """
        Store a sighting and bump the sighted pet's counters.
        
        Args:
            sighting: Sighting to store (an id is generated if empty)
            
        Returns:
            str: Document ID of the sighting
            
        Raises:
            ServiceUnavailableError: If Firestore client is not initialized
        """
        return await asyncio.to_thread(self._submit_sighting, sighting)
    
    def _submit_sighting(self, sighting: PetSighting) -> str:
        client = self._require_client()
        if not sighting.id:
            sighting.id = str(uuid.uuid4())
        
        try:
            client.collection(SIGHTINGS_COLLECTION).document(sighting.id).set(
                sighting.to_firestore_document()
            )
            client.collection(self.collection_name).document(sighting.pet_id).update({
                "sightingCount": firestore.Increment(1),
                "lastSightingDate": sighting.sighting_date
            })
            logger.info(f"Recorded sighting {sighting.id} for pet {sighting.pet_id}")
            return sighting.id
        except Exception as e:
            logger.error(f"Failed to submit sighting for pet {sighting.pet_id}: {e}")
            raise
    
    async def save_lost_pet(self, pet: LostPet) -> str:
        """
        Create or overwrite a lost pet report.
        
        Returns:
            str: Document ID of the report
        """
        return await asyncio.to_thread(self._save_lost_pet, pet)
    
    def _save_lost_pet(self, pet: LostPet) -> str:
        client = self._require_client()
        if not pet.id:
            pet.id = str(uuid.uuid4())
        
        client.collection(self.collection_name).document(pet.id).set(pet.to_firestore_document())
        logger.info(f"Saved lost pet report {pet.id} ({pet.name})")
        return pet.id
    
    async def get_pet(self, pet_id: str) -> LostPet:
        """
        Raises:
            NotFoundError: If no report has this id
        """
        return await asyncio.to_thread(self._get_pet, pet_id)
    
    def _get_pet(self, pet_id: str) -> LostPet:
        client = self._require_client()
        doc = client.collection(self.collection_name).document(pet_id).get()
        if not doc.exists:
            raise NotFoundError("Pet", pet_id)
        return LostPet.from_firestore_doc(doc.id, doc.to_dict() or {})
    
    async def fetch_user_pets(self, user_id: str) -> list[LostPet]:
        """Reports created by a user, newest first."""
        return await asyncio.to_thread(self._fetch_user_pets, user_id)
    
    def _fetch_user_pets(self, user_id: str) -> list[LostPet]:
        client = self._require_client()
        query = client.collection(self.collection_name).where("ownerID", "==", user_id)
        query = query.order_by("reportedDate", direction=firestore.Query.DESCENDING)
        
        pets = []
        for doc in query.stream():
            pet = self._decode(doc)
            if pet is not None:
                pets.append(pet)
        return pets
    
    async def update_pet_status(self, pet_id: str, is_active: bool) -> None:
        """
        Mark a report active again or found.
        
        A found report gets a server-side foundDate; reactivating clears it.
        """
        await asyncio.to_thread(self._update_pet_status, pet_id, is_active)
    
    def _update_pet_status(self, pet_id: str, is_active: bool) -> None:
        client = self._require_client()
        doc_ref = client.collection(self.collection_name).document(pet_id)
        if not doc_ref.get().exists:
            raise NotFoundError("Pet", pet_id)
        
        doc_ref.update({
            "isActive": is_active,
            "foundDate": firestore.DELETE_FIELD if is_active else firestore.SERVER_TIMESTAMP
        })
        logger.info(f"Pet {pet_id} marked {'active' if is_active else 'found'}")
