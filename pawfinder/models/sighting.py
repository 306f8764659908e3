"""
Sighting models: a community member reporting where a lost pet was seen.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from .pet import LocationData, to_utc
from ..utils.url_helpers import gs_to_public_url


class SightingConfidence(str, Enum):
    LOW = "Might be the pet"
    MEDIUM = "Looks similar"
    HIGH = "Very confident"
    CERTAIN = "Definitely this pet"
    
    @property
    def color(self) -> str:
        return {
            SightingConfidence.LOW: "orange",
            SightingConfidence.MEDIUM: "yellow",
            SightingConfidence.HIGH: "blue",
            SightingConfidence.CERTAIN: "green",
        }[self]
    
    @classmethod
    def parse(cls, value) -> "SightingConfidence":
        """Accept either the member name ('high') or its label ('Very confident')."""
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for member in cls:
            if text.lower() in (member.name.lower(), member.value.lower()):
                return member
        raise ValueError(f"Unknown confidence: {value!r}")


@dataclass
class PetSighting:
    """Represents a sighting of a lost pet."""
    id: str
    pet_id: str
    sighting_date: datetime
    location: LocationData
    description: str = ""
    reporter_id: Optional[str] = None
    confidence: SightingConfidence = SightingConfidence.MEDIUM
    photos: list[str] = field(default_factory=list)
    is_verified: bool = False
    
    @classmethod
    def from_firestore_doc(cls, doc_id: str, data: dict) -> "PetSighting":
        """Create from Firestore document."""
        try:
            confidence = SightingConfidence.parse(data.get("confidence", ""))
        except ValueError:
            confidence = SightingConfidence.MEDIUM
        return cls(
            id=doc_id,
            pet_id=data.get("petId", ""),
            sighting_date=to_utc(data.get("sightingDate")),
            location=LocationData.from_value(data.get("location")),
            description=data.get("description", "") or "",
            reporter_id=data.get("reporterId"),
            confidence=confidence,
            photos=list(data.get("photos") or []),
            is_verified=bool(data.get("isVerified", False))
        )
    
    def to_firestore_document(self) -> dict:
        """
        Convert to Firestore document format.
        
        Returns:
            dict: Document data for Firestore
        """
        return {
            "petId": self.pet_id,
            "sightingDate": self.sighting_date,
            "location": self.location.to_dict(),
            "description": self.description,
            "reporterId": self.reporter_id,
            "confidence": self.confidence.value,
            "photos": list(self.photos),
            "isVerified": self.is_verified
        }
    
    def to_dict(self) -> dict:
        """Convert to dictionary for JSON response."""
        return {
            "id": self.id,
            "pet_id": self.pet_id,
            "sighting_date": self.sighting_date.isoformat() if self.sighting_date else None,
            "location": {
                "lat": self.location.latitude,
                "lng": self.location.longitude
            },
            "location_details": self.location.to_dict(),
            "description": self.description,
            "reporter_id": self.reporter_id,
            "confidence": self.confidence.value,
            "photos": [gs_to_public_url(p) for p in self.photos],
            "is_verified": self.is_verified
        }
