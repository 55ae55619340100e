from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from event_pass.utils.time import utcnow

STUDENT = "student"
ADMIN = "admin"


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str = Field(index=True, unique=True)
    roll_number: Optional[str] = Field(default=None, unique=True)  # students only
    role: str = Field(default=STUDENT, index=True)  # student | admin
    # Telegram chat id for push delivery of notifications
    tg_id: Optional[int] = None
    profile_pic_url: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
