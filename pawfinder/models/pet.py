"""
Lost pet report models and their Firestore / JSON representations.
"""
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from ..utils.geo_helpers import is_valid_coordinate
from ..utils.url_helpers import gs_to_public_url


def _normalize(value: str) -> str:
    return value.strip().lower().replace("-", " ").replace("_", " ")


class PetSpecies(str, Enum):
    DOG = "Dog"
    CAT = "Cat"
    BIRD = "Bird"
    RABBIT = "Rabbit"
    OTHER = "Other"
    
    @classmethod
    def parse(cls, value) -> "PetSpecies":
        """Parse 'dog', 'Dog' or a PetSpecies; raises ValueError if unknown."""
        if isinstance(value, cls):
            return value
        key = _normalize(str(value))
        for member in cls:
            if _normalize(member.value) == key:
                return member
        raise ValueError(f"Unknown species: {value!r}")


class PetSize(str, Enum):
    SMALL = "Small"
    MEDIUM = "Medium"
    LARGE = "Large"
    EXTRA_LARGE = "Extra Large"
    
    @property
    def description(self) -> str:
        return {
            PetSize.SMALL: "Under 25 lbs",
            PetSize.MEDIUM: "25-60 lbs",
            PetSize.LARGE: "60-100 lbs",
            PetSize.EXTRA_LARGE: "Over 100 lbs",
        }[self]
    
    @classmethod
    def parse(cls, value) -> "PetSize":
        """Parse 'extra-large', 'Extra Large' or a PetSize; raises ValueError if unknown."""
        if isinstance(value, cls):
            return value
        key = _normalize(str(value))
        for member in cls:
            if _normalize(member.value) == key:
                return member
        raise ValueError(f"Unknown size: {value!r}")


class ContactMethod(str, Enum):
    PHONE = "Phone"
    EMAIL = "Email"
    BOTH = "Both"


def to_utc(value) -> Optional[datetime]:
    """
    Coerce a Firestore timestamp, datetime or ISO string to an aware UTC datetime.
    
    Naive datetimes are assumed to already be UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if not isinstance(value, datetime):
        raise ValueError(f"Not a timestamp: {value!r}")
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class LocationData:
    """Where a pet was last seen or sighted."""
    latitude: float
    longitude: float
    address: str = ""
    city: str = ""
    state: str = ""
    
    @property
    def has_valid_coordinate(self) -> bool:
        return is_valid_coordinate(self.latitude, self.longitude)
    
    def to_dict(self) -> dict:
        """Convert to dictionary format."""
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "address": self.address,
            "city": self.city,
            "state": self.state
        }
    
    @classmethod
    def from_value(cls, value) -> "LocationData":
        """
        Build from a Firestore map or a GeoPoint-like object.
        
        Missing coordinates become NaN so that the search engine can
        exclude the report instead of failing.
        """
        if value is None:
            return cls(latitude=math.nan, longitude=math.nan)
        if isinstance(value, dict):
            return cls(
                latitude=_as_float(value.get("latitude")),
                longitude=_as_float(value.get("longitude")),
                address=value.get("address", "") or "",
                city=value.get("city", "") or "",
                state=value.get("state", "") or ""
            )
        return cls(
            latitude=_as_float(getattr(value, "latitude", None)),
            longitude=_as_float(getattr(value, "longitude", None))
        )


def _as_float(value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


@dataclass
class ContactInfo:
    phone: str = ""
    email: str = ""
    preferred_contact_method: ContactMethod = ContactMethod.BOTH
    
    def to_dict(self) -> dict:
        return {
            "phone": self.phone,
            "email": self.email,
            "preferredContactMethod": self.preferred_contact_method.value
        }
    
    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ContactInfo":
        data = data or {}
        try:
            method = ContactMethod(data.get("preferredContactMethod", ContactMethod.BOTH.value))
        except ValueError:
            method = ContactMethod.BOTH
        return cls(
            phone=data.get("phone", "") or "",
            email=data.get("email", "") or "",
            preferred_contact_method=method
        )


@dataclass
class LostPet:
    """A lost pet report as stored in the lostPets collection."""
    id: str
    name: str
    species: PetSpecies
    size: PetSize
    last_seen_location: LocationData
    last_seen_date: datetime
    breed: str = ""
    age: int = 0
    color: str = ""
    description: str = ""
    contact_info: ContactInfo = field(default_factory=ContactInfo)
    owner_id: Optional[str] = None
    photos: list[str] = field(default_factory=list)
    is_active: bool = True
    reported_date: Optional[datetime] = None
    reward_amount: Optional[float] = None
    distinctive_features: list[str] = field(default_factory=list)
    temperament: str = ""
    sighting_count: int = 0
    last_sighting_date: Optional[datetime] = None
    
    @property
    def has_reward(self) -> bool:
        return self.reward_amount is not None and self.reward_amount > 0
    
    @classmethod
    def from_firestore_doc(cls, doc_id: str, data: dict) -> "LostPet":
        """
        Create from a Firestore document.
        
        Unknown species decode to Other and unknown sizes to Medium.
        
        Raises:
            ValueError: If the last seen date is missing or malformed
        """
        try:
            species = PetSpecies.parse(data.get("species", ""))
        except ValueError:
            species = PetSpecies.OTHER
        try:
            size = PetSize.parse(data.get("size", ""))
        except ValueError:
            size = PetSize.MEDIUM
        
        last_seen_date = to_utc(data.get("lastSeenDate"))
        if last_seen_date is None:
            raise ValueError(f"Pet {doc_id} has no lastSeenDate")
        
        reward = data.get("rewardAmount")
        return cls(
            id=doc_id,
            name=data.get("name", "") or "",
            breed=data.get("breed", "") or "",
            species=species,
            age=int(data.get("age") or 0),
            color=data.get("color", "") or "",
            size=size,
            description=data.get("description", "") or "",
            last_seen_location=LocationData.from_value(data.get("lastSeenLocation")),
            last_seen_date=last_seen_date,
            contact_info=ContactInfo.from_dict(data.get("contactInfo")),
            owner_id=data.get("ownerID"),
            photos=list(data.get("photos") or []),
            is_active=bool(data.get("isActive", False)),
            reported_date=to_utc(data.get("reportedDate")),
            reward_amount=float(reward) if reward is not None else None,
            distinctive_features=list(data.get("distinctiveFeatures") or []),
            temperament=data.get("temperament", "") or "",
            sighting_count=int(data.get("sightingCount") or 0),
            last_sighting_date=to_utc(data.get("lastSightingDate"))
        )
    
    def to_firestore_document(self) -> dict:
        """Convert to Firestore document format."""
        return {
            "name": self.name,
            "breed": self.breed,
            "species": self.species.value,
            "age": self.age,
            "color": self.color,
            "size": self.size.value,
            "description": self.description,
            "lastSeenLocation": self.last_seen_location.to_dict(),
            "lastSeenDate": self.last_seen_date,
            "contactInfo": self.contact_info.to_dict(),
            "ownerID": self.owner_id,
            "photos": list(self.photos),
            "isActive": self.is_active,
            "reportedDate": self.reported_date,
            "rewardAmount": self.reward_amount,
            "distinctiveFeatures": list(self.distinctive_features),
            "temperament": self.temperament,
            "sightingCount": self.sighting_count,
        }
    
    def to_dict(self) -> dict:
        """Convert to dictionary for JSON response."""
        return {
            "id": self.id,
            "name": self.name,
            "breed": self.breed,
            "species": self.species.value,
            "age": self.age,
            "color": self.color,
            "size": self.size.value,
            "description": self.description,
            "last_seen_location": self.last_seen_location.to_dict(),
            "last_seen_date": _iso(self.last_seen_date),
            "contact_info": self.contact_info.to_dict(),
            "owner_id": self.owner_id,
            "photos": [gs_to_public_url(p) for p in self.photos],
            "is_active": self.is_active,
            "reported_date": _iso(self.reported_date),
            "reward_amount": self.reward_amount,
            "distinctive_features": list(self.distinctive_features),
            "temperament": self.temperament,
            "sighting_count": self.sighting_count,
            "last_sighting_date": _iso(self.last_sighting_date),
        }
