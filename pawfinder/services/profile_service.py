"""
Profile service for the Firestore users collection.
"""
import logging

from ..config import USERS_COLLECTION
from ..exceptions import NotFoundError, ServiceUnavailableError, ValidationError
from ..models.user import AppUser
from .. import gcp_clients

logger = logging.getLogger(__name__)

# Request keys accepted by update_profile, mapped to document fields
EDITABLE_FIELDS = {
    "full_name": "fullName",
    "notification_general": "notificationGeneral",
    "notification_lost_pets": "notificationLostPets",
    "notification_messages": "notificationMessages",
}


class ProfileService:
    
    def __init__(self, firestore_client=None):
        self.firestore = firestore_client or gcp_clients.firestore_client
        self.collection_name = USERS_COLLECTION
    
    def _document(self, user_id: str):
        if not self.firestore:
            raise ServiceUnavailableError("Firestore")
        return self.firestore.collection(self.collection_name).document(user_id)
    
    def get_profile(self, user_id: str) -> AppUser:
        """
        Raises:
            NotFoundError: If the user has no profile document
        """
        doc = self._document(user_id).get()
        if not doc.exists:
            raise NotFoundError("User", user_id)
        return AppUser.from_firestore_doc(doc.id, doc.to_dict() or {})
    
    def update_profile(self, user_id: str, changes: dict) -> AppUser:
        """
        Merge editable profile fields and return the updated profile.
        
        Args:
            user_id: Profile owner
            changes: Subset of full_name and the notification_* flags
            
        Raises:
            ValidationError: On unknown fields, a blank name or non-boolean flags
        """
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError("profile", f"Cannot update: {', '.join(sorted(unknown))}")
        
        update = {}
        for key, value in changes.items():
            if key == "full_name":
                if not isinstance(value, str) or not value.strip():
                    raise ValidationError("full_name", "Full name cannot be empty")
                value = value.strip()
            elif not isinstance(value, bool):
                raise ValidationError(key, f"{key} must be true or false")
            update[EDITABLE_FIELDS[key]] = value
        
        if update:
            self._document(user_id).set(update, merge=True)
            logger.info(f"Updated profile {user_id}: {sorted(update)}")
        
        return self.get_profile(user_id)
    
    def set_profile_image(self, user_id: str, image_url: str) -> None:
        self._document(user_id).set({"profileImageURL": image_url}, merge=True)
        logger.info(f"Profile image for {user_id} set to {image_url}")
