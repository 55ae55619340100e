from typing import List, Optional

from sqlalchemy import asc
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from event_pass.models import User
from event_pass.models.user import ADMIN, STUDENT


async def create_user(
    session: AsyncSession,
    name: str,
    email: str,
    role: str = STUDENT,
    roll_number: Optional[str] = None,
    tg_id: Optional[int] = None,
    profile_pic_url: Optional[str] = None,
) -> User:
    """Insert a user profile provisioned by the auth service.

    Roll numbers are only kept for students.
    """
    if role not in {STUDENT, ADMIN}:
        raise ValueError(f"Unknown role: {role}")
    if roll_number is not None:
        roll_number = roll_number.strip() or None

    user = User(
        name=name,
        email=email,
        role=role,
        roll_number=roll_number if role == STUDENT else None,
        tg_id=tg_id,
        profile_pic_url=profile_pic_url,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def get_user(session: AsyncSession, user_id: int) -> Optional[User]:
    return await session.get(User, user_id)


async def list_by_role(session: AsyncSession, role: str) -> List[User]:
    result = await session.execute(
        select(User).where(User.role == role).order_by(asc(User.id))  # type: ignore[arg-type]
    )
    return list(result.scalars().all())
