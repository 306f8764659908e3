"""
User profile model stored in the users collection.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class AppUser:
    id: str
    email: str
    full_name: str
    profile_image_url: Optional[str] = None
    notification_general: bool = True
    notification_lost_pets: bool = False
    notification_messages: bool = True
    
    @classmethod
    def from_firestore_doc(cls, doc_id: str, data: dict) -> "AppUser":
        return cls(
            id=doc_id,
            email=data.get("email", "") or "",
            full_name=data.get("fullName", "") or "",
            profile_image_url=data.get("profileImageURL"),
            notification_general=data.get("notificationGeneral", True),
            notification_lost_pets=data.get("notificationLostPets", False),
            notification_messages=data.get("notificationMessages", True)
        )
    
    def to_firestore_document(self) -> dict:
        return {
            "email": self.email,
            "fullName": self.full_name,
            "profileImageURL": self.profile_image_url,
            "notificationGeneral": self.notification_general,
            "notificationLostPets": self.notification_lost_pets,
            "notificationMessages": self.notification_messages
        }
    
    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "profile_image_url": self.profile_image_url,
            "notification_general": self.notification_general,
            "notification_lost_pets": self.notification_lost_pets,
            "notification_messages": self.notification_messages
        }
