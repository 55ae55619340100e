from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel, UniqueConstraint

from event_pass.utils.time import utcnow


class Registration(SQLModel, table=True):
    __table_args__ = (
        UniqueConstraint("student_id", "event_id", name="unique_student_event"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    student_id: int = Field(foreign_key="user.id", index=True)
    event_id: int = Field(foreign_key="event.id", index=True)
    token: str = Field(index=True)  # signed pass, rendered as QR
    scanned: bool = Field(default=False)
    scanned_at: Optional[datetime] = Field(default=None, sa_type=DateTime)
    scanned_by: Optional[int] = Field(default=None, foreign_key="user.id")
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
