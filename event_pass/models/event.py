from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime
from sqlmodel import Field, SQLModel

from event_pass.utils.time import utcnow


class EventStatus:
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    ARCHIVED = "archived"  # reserved for manual archival, never set by the sweeper

    ALL = (UPCOMING, ONGOING, COMPLETED, ARCHIVED)


class Event(SQLModel, table=True):
    __table_args__ = (
        CheckConstraint(
            "current_registrations >= 0 AND current_registrations <= capacity",
            name="registrations_within_capacity",
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    description: str
    date: datetime = Field(sa_type=DateTime)  # start, naive UTC
    venue: str
    capacity: int
    current_registrations: int = 0
    poster_url: str = ""
    created_by: int = Field(foreign_key="user.id")
    status: str = Field(default=EventStatus.UPCOMING, index=True)
    scheduled_for_deletion: Optional[datetime] = Field(default=None, sa_type=DateTime)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
