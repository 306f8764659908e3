"""
Tests for sighting queries.
"""
import asyncio
from unittest.mock import MagicMock, patch

import pytest

from pawfinder.exceptions import ServiceUnavailableError
from pawfinder.services.sighting_service import SightingService


@pytest.fixture
def mock_firestore():
    return MagicMock()


@pytest.fixture
def pet_query(mock_firestore):
    """The query built for one pet; paging returns the same query."""
    query = mock_firestore.collection.return_value.where.return_value.order_by.return_value
    query.start_after.return_value = query
    return query


def sighting_doc(mock_firestore_doc, doc_id, lat, lng, now):
    return mock_firestore_doc(doc_id, {
        "petId": "buddy",
        "sightingDate": now,
        "location": {"latitude": lat, "longitude": lng},
        "description": f"Sighting {doc_id}",
        "reporterId": "user-2",
        "confidence": "Looks similar",
    })


class TestGetSightings:
    """Tests for SightingService.get_sightings."""
    
    def test_page_and_cursor(self, mock_firestore, pet_query, mock_firestore_doc, now):
        """Test a full page returns the last document as the cursor."""
        docs = [sighting_doc(mock_firestore_doc, f"s{i}", 37.7, -122.4, now) for i in range(3)]
        pet_query.limit.return_value.stream.side_effect = [docs]
        
        result = SightingService(mock_firestore).get_sightings("buddy", limit=2)
        
        mock_firestore.collection.return_value.where.assert_called_with("petId", "==", "buddy")
        assert [s["id"] for s in result["data"]] == ["s0", "s1"]
        assert result["next_cursor"] == "s1"
    
    def test_bounds_filter_deep_scans(self, mock_firestore, pet_query, mock_firestore_doc, now):
        """Test out-of-bounds sightings are skipped and scanning stops when exhausted."""
        inside = sighting_doc(mock_firestore_doc, "in", 35.0, -125.0, now)
        outside = sighting_doc(mock_firestore_doc, "out", 45.0, -125.0, now)
        pet_query.limit.return_value.stream.side_effect = [[inside, outside], []]
        bounds = {"north": 40.0, "south": 30.0, "east": -120.0, "west": -130.0}
        
        result = SightingService(mock_firestore).get_sightings("buddy", bounds=bounds)
        
        assert [s["id"] for s in result["data"]] == ["in"]
        assert result["data"][0]["location"] == {"lat": 35.0, "lng": -125.0}
        assert result["next_cursor"] is None
    
    def test_cursor_starts_after_document(self, mock_firestore, pet_query, mock_firestore_doc, now):
        """Test an existing cursor document is used for start_after."""
        cursor_doc = mock_firestore_doc("s1", {}, exists=True)
        mock_firestore.collection.return_value.document.return_value.get.return_value = cursor_doc
        pet_query.limit.return_value.stream.side_effect = [[]]
        
        result = SightingService(mock_firestore).get_sightings("buddy", cursor="s1")
        
        pet_query.start_after.assert_called_once_with(cursor_doc)
        assert result == {"data": [], "next_cursor": None}
    
    def test_client_unavailable(self):
        with patch("pawfinder.gcp_clients.firestore_client", None):
            with pytest.raises(ServiceUnavailableError):
                SightingService().get_sightings("buddy")


class TestUserSightings:
    """Tests for SightingService.fetch_user_sightings."""
    
    def test_fetch_user_sightings(self, mock_firestore, mock_firestore_doc, now):
        query = mock_firestore.collection.return_value.where.return_value.order_by.return_value
        query.stream.return_value = [sighting_doc(mock_firestore_doc, "s1", 37.7, -122.4, now)]
        
        sightings = asyncio.run(SightingService(mock_firestore).fetch_user_sightings("user-2"))
        
        mock_firestore.collection.return_value.where.assert_called_once_with("reporterId", "==", "user-2")
        assert [s.id for s in sightings] == ["s1"]
        assert sightings[0].reporter_id == "user-2"
