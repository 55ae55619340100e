from typing import List

from sqlalchemy import desc
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from event_pass.models import Notification

# --- CRUD helpers ---


async def list_for_user(session: AsyncSession, user_id: int) -> List[Notification]:
    """Newest first; rows flagged ``deleted`` are included so a UI can gray them out."""
    result = await session.execute(
        select(Notification)
        .where(Notification.user_id == user_id)  # type: ignore[arg-type]
        .order_by(desc(Notification.created_at), desc(Notification.id))  # type: ignore[arg-type]
    )
    return list(result.scalars().all())


async def mark_read(session: AsyncSession, user_id: int, notification_id: int) -> bool:
    notification = await session.get(Notification, notification_id)
    if not notification or notification.user_id != user_id:
        return False
    notification.read = True
    session.add(notification)
    await session.commit()
    return True
