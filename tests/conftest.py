"""
Shared fixtures for the PawFinder test suite.
"""
import math
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from pawfinder.config import EARTH_RADIUS_KM
from pawfinder.models.pet import LocationData, LostPet, PetSize, PetSpecies
from pawfinder.models.search import Coordinate

FIXED_NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)
ORIGIN = Coordinate(0.0, 0.0)


def north_of_origin(km: float) -> LocationData:
    """A location `km` kilometers due north of (0, 0)."""
    return LocationData(latitude=math.degrees(km / EARTH_RADIUS_KM), longitude=0.0)


class FakeGateway:
    """In-memory stand-in for PetService.fetch_active_pets."""
    
    def __init__(self, pets=None, error=None):
        self.pets = list(pets or [])
        self.error = error
        self.calls = []
    
    async def fetch_active_pets(self, center, radius_km):
        self.calls.append((center, radius_km))
        if self.error:
            raise self.error
        return list(self.pets)


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def make_pet():
    """Factory for LostPet reports positioned relative to the origin."""
    def _make(pet_id="pet-1", species=PetSpecies.DOG, size=PetSize.MEDIUM,
              km=1.0, is_active=True, reward=None, days_ago=1, location=None, name=None):
        return LostPet(
            id=pet_id,
            name=name or f"Pet {pet_id}",
            species=species,
            size=size,
            last_seen_location=location or north_of_origin(km),
            last_seen_date=FIXED_NOW - timedelta(days=days_ago),
            is_active=is_active,
            reward_amount=reward
        )
    return _make


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def mock_firestore_doc():
    """Factory for Firestore document snapshots."""
    def _make(doc_id, data, exists=True):
        doc = MagicMock()
        doc.id = doc_id
        doc.exists = exists
        doc.to_dict.return_value = data
        return doc
    return _make


@pytest.fixture
def pet_document():
    """Firestore data for an active lost dog in San Francisco."""
    return {
        "name": "Buddy",
        "breed": "Golden Retriever",
        "species": "Dog",
        "age": 3,
        "color": "Golden",
        "size": "Large",
        "description": "Friendly golden retriever, very social",
        "lastSeenLocation": {
            "latitude": 37.7849,
            "longitude": -122.4094,
            "address": "Golden Gate Park, San Francisco",
            "city": "San Francisco",
            "state": "CA"
        },
        "lastSeenDate": FIXED_NOW - timedelta(days=2),
        "contactInfo": {"phone": "(555) 123-4567", "email": "owner@email.com", "preferredContactMethod": "Phone"},
        "ownerID": "user-1",
        "photos": ["gs://pawfinder-pet-photos/pet_photos/buddy/image_0.jpg"],
        "isActive": True,
        "reportedDate": FIXED_NOW - timedelta(days=2),
        "rewardAmount": 500.0,
        "distinctiveFeatures": ["Blue collar", "Scar on left ear"],
        "temperament": "Friendly and energetic",
    }


@pytest.fixture
def origin():
    return ORIGIN
