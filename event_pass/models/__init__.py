from .user import User
from .event import Event, EventStatus
from .registration import Registration
from .notification import Notification

__all__ = [
    "User",
    "Event",
    "EventStatus",
    "Registration",
    "Notification",
]
