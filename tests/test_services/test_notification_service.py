"""
Tests for scheduling notifications over Pub/Sub.
"""
import json
from unittest.mock import MagicMock, patch

import pytest

from pawfinder.exceptions import PublishError
from pawfinder.models.notification import DAILY_MOTIVATION, HERO_REMINDER, SIGHTING_SUCCESS
from pawfinder.models.user import AppUser
from pawfinder.services.notification_service import NotificationService

TOPIC = "projects/test-project/topics/pawfinder-notifications"


@pytest.fixture
def mock_publisher():
    publisher = MagicMock()
    publisher.publish.return_value.result.return_value = "msg-1"
    return publisher


@pytest.fixture
def service(mock_publisher):
    return NotificationService(publisher=mock_publisher, topic_path=TOPIC)


def published(mock_publisher):
    """Decode the last published payload and its attributes."""
    args, kwargs = mock_publisher.publish.call_args
    return args[0], json.loads(args[1].decode("utf-8")), kwargs


class TestSchedule:
    """Tests for NotificationService scheduling helpers."""
    
    def test_thank_you(self, service, mock_publisher):
        """Test the thank-you fires after one second with a badge."""
        message_id = service.schedule_thank_you("Buddy", user_id="u1")
        
        topic, data, attributes = published(mock_publisher)
        assert message_id == "msg-1"
        assert topic == TOPIC
        assert attributes == {"category": SIGHTING_SUCCESS}
        assert data["trigger"] == {"type": "interval", "seconds": 1.0, "repeats": False}
        assert data["badge"] == 1
        assert "Buddy" in data["body"]
        assert data["user_info"] == {"petName": "Buddy", "type": SIGHTING_SUCCESS}
        assert data["identifier"].startswith("sighting_thank_you_")
    
    def test_hero_reminder(self, service, mock_publisher):
        service.schedule_hero_reminder("Buddy")
        
        _, data, attributes = published(mock_publisher)
        assert attributes == {"category": HERO_REMINDER}
        assert data["trigger"]["seconds"] == 30.0
        assert data["user_id"] == {"string": "anonymous"}
    
    def test_daily_motivation(self, service, mock_publisher):
        service.schedule_daily_motivation(user_id="u1")
        
        _, data, _ = published(mock_publisher)
        assert data["identifier"] == "daily_motivation"
        assert data["trigger"] == {"type": "calendar", "hour": 9, "minute": 0, "repeats": True}
    
    def test_preferences_respected(self, service, mock_publisher):
        """Test disabled categories are skipped without publishing."""
        quiet = AppUser("u1", "a@b.c", "Ana", notification_general=False, notification_lost_pets=False)
        
        assert service.schedule_thank_you("Buddy", user_id="u1", user=quiet) is None
        assert service.schedule_daily_motivation(user_id="u1", user=quiet) is None
        mock_publisher.publish.assert_not_called()
    
    def test_allows(self):
        opted_in = AppUser("u1", "a@b.c", "Ana", notification_general=False, notification_lost_pets=True)
        assert NotificationService.allows(None, SIGHTING_SUCCESS)
        assert NotificationService.allows(opted_in, DAILY_MOTIVATION)
        assert not NotificationService.allows(opted_in, HERO_REMINDER)
    
    def test_publish_failure(self, service, mock_publisher):
        mock_publisher.publish.return_value.result.side_effect = TimeoutError("timed out")
        with pytest.raises(PublishError):
            service.schedule_thank_you("Buddy")
    
    def test_no_publisher(self):
        with patch("pawfinder.gcp_clients.pubsub_publisher", None):
            service = NotificationService(topic_path=TOPIC)
        assert service.schedule_thank_you("Buddy") is None
