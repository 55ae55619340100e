from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from event_pass.models import Event, Notification, Registration, User
from event_pass.utils.time import isoformat_utc

# ---------- request bodies ----------


class EventCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    date: datetime
    venue: str = Field(min_length=1)
    capacity: int = Field(ge=1)
    poster_url: str = Field(default="", alias="posterUrl")


class EventUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    date: Optional[datetime] = None
    venue: Optional[str] = Field(default=None, min_length=1)
    capacity: Optional[int] = Field(default=None, ge=1)
    poster_url: Optional[str] = Field(default=None, alias="posterUrl")


class ScanRequest(BaseModel):
    token: str = Field(min_length=1, validation_alias=AliasChoices("token", "qrCodeData"))


# ---------- response payloads ----------


def user_summary(user: Optional[User]) -> Optional[dict]:
    if user is None:
        return None
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "rollNumber": user.roll_number,
        "profilePic": user.profile_pic_url,
    }


def event_summary(event: Optional[Event]) -> Optional[dict]:
    if event is None:
        return None
    return {
        "id": event.id,
        "title": event.title,
        "date": isoformat_utc(event.date),
        "venue": event.venue,
        "posterUrl": event.poster_url,
    }


def event_to_dict(event: Event) -> dict:
    return {
        "id": event.id,
        "title": event.title,
        "description": event.description,
        "date": isoformat_utc(event.date),
        "venue": event.venue,
        "capacity": event.capacity,
        "currentRegistrations": event.current_registrations,
        "posterUrl": event.poster_url,
        "createdBy": event.created_by,
        "status": event.status,
        "scheduledForDeletion": isoformat_utc(event.scheduled_for_deletion),
        "createdAt": isoformat_utc(event.created_at),
    }


def registration_to_dict(registration: Registration, **related) -> dict:
    data = {
        "id": registration.id,
        "studentId": registration.student_id,
        "eventId": registration.event_id,
        "scanned": registration.scanned,
        "scannedAt": isoformat_utc(registration.scanned_at),
        "scannedBy": registration.scanned_by,
        "createdAt": isoformat_utc(registration.created_at),
    }
    data.update(related)
    return data


def notification_to_dict(notification: Notification) -> dict:
    return {
        "id": notification.id,
        "message": notification.message,
        "type": notification.type,
        "read": notification.read,
        "deleted": notification.deleted,
        "eventId": notification.event_id,
        "createdAt": isoformat_utc(notification.created_at),
    }
