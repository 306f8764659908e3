"""
Notification requests handed to the delivery pipeline over Pub/Sub.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

# Categories, matching the "type" key of each request's user info
SIGHTING_SUCCESS = "sighting_success"
HERO_REMINDER = "hero_reminder"
DAILY_MOTIVATION = "daily_motivation"


@dataclass
class NotificationRequest:
    """
    A local notification to be scheduled on a user's device.
    
    Exactly one trigger is set: a one-shot delay in seconds, or a
    daily (hour, minute) time that repeats.
    """
    identifier: str
    category: str
    title: str
    body: str
    user_id: Optional[str] = None
    delay_seconds: Optional[float] = None
    daily_at: Optional[tuple[int, int]] = None
    badge: Optional[int] = None
    user_info: dict = field(default_factory=dict)
    
    @property
    def repeats(self) -> bool:
        return self.daily_at is not None
    
    @staticmethod
    def new_identifier(prefix: str) -> str:
        return f"{prefix}_{uuid.uuid4()}"
    
    def to_pubsub_message(self) -> dict:
        """
        Convert to Pub/Sub message format.
        
        Returns:
            dict: Message data; user_id uses the Avro union wrapper
        """
        if self.daily_at is not None:
            trigger = {"type": "calendar", "hour": self.daily_at[0], "minute": self.daily_at[1], "repeats": True}
        else:
            trigger = {"type": "interval", "seconds": self.delay_seconds or 0.0, "repeats": False}
        
        return {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "identifier": self.identifier,
            "category": self.category,
            "title": self.title,
            "body": self.body,
            "badge": self.badge,
            "trigger": trigger,
            "user_id": {"string": self.user_id} if self.user_id else {"string": "anonymous"},
            "user_info": dict(self.user_info, type=self.category)
        }
