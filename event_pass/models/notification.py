from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from event_pass.utils.time import utcnow

NOTIFICATION_TYPES = ("event_update", "new_event", "reminder", "other")


class Notification(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    message: str
    type: str = Field(default="other")  # event_update | new_event | reminder | other
    read: bool = Field(default=False)
    # Set instead of removing the row when the referenced event is purged
    deleted: bool = Field(default=False)
    # No foreign key: the row outlives its event
    event_id: Optional[int] = Field(default=None, index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
