"""
Notification service: schedules device notifications via Pub/Sub.
"""
import json
import logging
from typing import Optional

from ..config import (
    DAILY_MOTIVATION_HOUR, DAILY_MOTIVATION_MINUTE,
    HERO_REMINDER_DELAY_SECONDS, THANK_YOU_DELAY_SECONDS,
)
from ..exceptions import PublishError
from ..models.notification import (
    DAILY_MOTIVATION, HERO_REMINDER, SIGHTING_SUCCESS, NotificationRequest,
)
from ..models.user import AppUser
from .. import gcp_clients

logger = logging.getLogger(__name__)


class NotificationService:
    """Publishes notification requests for the delivery worker."""
    
    def __init__(self, publisher=None, topic_path: str = ""):
        """
        Initialize notification service.
        
        Args:
            publisher: Pub/Sub publisher client (or None to use global client)
            topic_path: Full topic path
        """
        self.publisher = publisher or gcp_clients.pubsub_publisher
        self.topic_path = topic_path or gcp_clients.topic_path
    
    @staticmethod
    def allows(user: Optional[AppUser], category: str) -> bool:
        """Whether a user's preferences permit this category (no profile means yes)."""
        if user is None:
            return True
        if category == DAILY_MOTIVATION:
            return user.notification_lost_pets
        return user.notification_general
    
    def schedule(self, request: NotificationRequest, user: Optional[AppUser] = None) -> Optional[str]:
        """
        Publish a notification request.
        
        Args:
            request: Notification to schedule
            user: Recipient profile, checked against notification preferences
            
        Returns:
            str: Message ID if published, None if skipped or client not initialized
            
        Raises:
            PublishError: If publishing fails
        """
        if not self.allows(user, request.category):
            logger.info(f"Skipping {request.category} notification: disabled by user {user.id}")
            return None
        
        message_data = request.to_pubsub_message()
        
        if not self.publisher:
            logger.info(f"Skipping Pub/Sub publish (client not initialized). Data: {message_data}")
            return None
        
        try:
            message_json = json.dumps(message_data).encode("utf-8")
            future = self.publisher.publish(self.topic_path, message_json, category=request.category)
            message_id = future.result(timeout=30)
            
            logger.info(f"Scheduled {request.category} notification {request.identifier}: message {message_id}")
            return message_id
            
        except Exception as e:
            logger.error(f"Failed to publish notification {request.identifier}: {e}")
            raise PublishError(f"Failed to publish notification: {str(e)}")
    
    def schedule_thank_you(self, pet_name: str, user_id: Optional[str] = None,
                           user: Optional[AppUser] = None) -> Optional[str]:
        """Thank the reporter right after a sighting is submitted."""
        request = NotificationRequest(
            identifier=NotificationRequest.new_identifier("sighting_thank_you"),
            category=SIGHTING_SUCCESS,
            title="Thank You, Community Hero!",
            body=(f"You just helped save {pet_name}'s life! The pet owner has been notified "
                  f"of your sighting report. You're making a real difference!"),
            user_id=user_id,
            delay_seconds=THANK_YOU_DELAY_SECONDS,
            badge=1,
            user_info={"petName": pet_name}
        )
        return self.schedule(request, user)
    
    def schedule_hero_reminder(self, pet_name: str, user_id: Optional[str] = None,
                               user: Optional[AppUser] = None) -> Optional[str]:
        """Follow-up sent shortly after the thank-you."""
        request = NotificationRequest(
            identifier=NotificationRequest.new_identifier("hero_reminder"),
            category=HERO_REMINDER,
            title="You're a Pet Hero!",
            body=(f"Your sighting report for {pet_name} is helping their family right now. "
                  f"Every report brings pets closer to home!"),
            user_id=user_id,
            delay_seconds=HERO_REMINDER_DELAY_SECONDS,
            user_info={"petName": pet_name}
        )
        return self.schedule(request, user)
    
    def schedule_daily_motivation(self, user_id: Optional[str] = None,
                                  user: Optional[AppUser] = None) -> Optional[str]:
        request = NotificationRequest(
            identifier="daily_motivation",
            category=DAILY_MOTIVATION,
            title="Help Find Lost Pets Today",
            body="Check if there are any lost pets in your area that need your help! Every sighting matters.",
            user_id=user_id,
            daily_at=(DAILY_MOTIVATION_HOUR, DAILY_MOTIVATION_MINUTE)
        )
        return self.schedule(request, user)
