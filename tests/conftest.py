import itertools
from datetime import timedelta

import pytest
import pytest_asyncio
from sqlmodel import select

from event_pass.db import init_db, make_engine, make_session_pool
from event_pass.models import Event, EventStatus, Notification
from event_pass.models.user import ADMIN
from event_pass.services.auth import Principal
from event_pass.services.notifier import Notifier
from event_pass.services.tokens import TokenCodec
from event_pass.services.users import create_user
from event_pass.utils.time import utcnow


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = make_engine(tmp_path / "event_pass_test.db")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_pool(engine):
    return make_session_pool(engine)


@pytest_asyncio.fixture
async def session(session_pool):
    async with session_pool() as session:
        yield session


@pytest.fixture
def codec():
    return TokenCodec("test-pass-secret")


@pytest_asyncio.fixture
async def notifier(session_pool):
    notifier = Notifier(session_pool, timeout=5)
    notifier.start()
    yield notifier
    await notifier.stop()


@pytest_asyncio.fixture
async def admin(session):
    user = await create_user(session, name="Dean Admin", email="admin@college.edu", role=ADMIN)
    return Principal(user.id, user.role)


@pytest.fixture
def make_student(session):
    counter = itertools.count(1)

    async def _make(name=None):
        n = next(counter)
        user = await create_user(
            session,
            name=name or f"Student {n}",
            email=f"student{n}@college.edu",
            roll_number=f"CS{n:03d}",
        )
        return Principal(user.id, user.role)

    return _make


@pytest.fixture
def make_event(session, admin):
    async def _make(capacity=2, date=None, status=EventStatus.UPCOMING, title="Tech Fest"):
        event = Event(
            title=title,
            description="Annual technical festival",
            date=date or utcnow() + timedelta(days=1),
            venue="Main Auditorium",
            capacity=capacity,
            created_by=admin.id,
            status=status,
        )
        session.add(event)
        await session.commit()
        await session.refresh(event)
        return event

    return _make


async def notifications_for(session_pool, user_id=None, **filters):
    async with session_pool() as s:
        query = select(Notification)
        if user_id is not None:
            query = query.where(Notification.user_id == user_id)
        for key, value in filters.items():
            query = query.where(getattr(Notification, key) == value)
        return list((await s.execute(query)).scalars().all())
