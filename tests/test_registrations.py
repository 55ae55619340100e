import asyncio
import csv
import io

import pytest
from sqlalchemy import func
from sqlmodel import select

from event_pass.models import Event, EventStatus, Registration
from event_pass.models.user import STUDENT
from event_pass.services import capacity as capacity_module
from event_pass.services.auth import Principal
from event_pass.services.events import EventNotFound
from event_pass.services.registrations import (
    AlreadyRegistered,
    EventClosed,
    EventFull,
    StudentNotFound,
    list_by_event,
    list_by_student,
    register,
)
from event_pass.services.reports import CSV_COLUMNS, NoRegistrations, export_event_csv
from tests.conftest import notifications_for


async def _counts(session_pool, event_id):
    async with session_pool() as s:
        event = await s.get(Event, event_id)
        rows = (
            await s.execute(select(func.count()).select_from(Registration).where(Registration.event_id == event_id))
        ).scalar_one()
        return event.current_registrations, rows


async def _attempt(session_pool, codec, notifier, student, event_id):
    async with session_pool() as s:
        try:
            await register(s, codec, notifier, student, event_id)
        except EventFull:
            return "full"
        except AlreadyRegistered:
            return "duplicate"
        return "ok"


@pytest.mark.asyncio
async def test_happy_path_scenario(session, codec, notifier, make_event, make_student):
    event = await make_event(capacity=2)
    alice, bob, carol = await make_student("Alice"), await make_student("Bob"), await make_student("Carol")

    registration = await register(session, codec, notifier, alice, event.id)
    assert registration.id is not None
    assert registration.scanned is False
    claim = codec.verify(registration.token)
    assert (claim.student_id, claim.event_id) == (alice.id, event.id)

    with pytest.raises(AlreadyRegistered):
        await register(session, codec, notifier, alice, event.id)

    await register(session, codec, notifier, bob, event.id)

    with pytest.raises(EventFull):
        await register(session, codec, notifier, carol, event.id)

    refreshed = await session.get(Event, event.id, populate_existing=True)
    assert refreshed.current_registrations == 2


@pytest.mark.asyncio
async def test_unknown_event(session, codec, notifier, make_student):
    student = await make_student()
    with pytest.raises(EventNotFound):
        await register(session, codec, notifier, student, 999)


@pytest.mark.asyncio
async def test_started_event_is_closed(session, codec, notifier, make_event, make_student):
    event = await make_event(capacity=10, status=EventStatus.ONGOING)
    with pytest.raises(EventClosed):
        await register(session, codec, notifier, await make_student(), event.id)


@pytest.mark.asyncio
async def test_concurrent_registrations_respect_capacity(session_pool, codec, notifier, make_event, make_student):
    event = await make_event(capacity=3)
    students = [await make_student() for _ in range(8)]

    results = await asyncio.gather(*(_attempt(session_pool, codec, notifier, s, event.id) for s in students))

    assert results.count("ok") == 3
    assert results.count("full") == 5
    assert await _counts(session_pool, event.id) == (3, 3)


@pytest.mark.asyncio
async def test_concurrent_duplicate_registration(session_pool, codec, notifier, make_event, make_student):
    event = await make_event(capacity=5)
    student = await make_student()

    results = await asyncio.gather(
        _attempt(session_pool, codec, notifier, student, event.id),
        _attempt(session_pool, codec, notifier, student, event.id),
    )

    assert sorted(results) == ["duplicate", "ok"]
    # the losing attempt gave its seat back
    assert await _counts(session_pool, event.id) == (1, 1)


@pytest.mark.asyncio
async def test_duplicate_for_the_last_seat(session_pool, codec, notifier, make_event, make_student):
    student = await make_student()

    for _ in range(5):
        event = await make_event(capacity=1)
        results = await asyncio.gather(
            _attempt(session_pool, codec, notifier, student, event.id),
            _attempt(session_pool, codec, notifier, student, event.id),
        )
        assert sorted(results) == ["duplicate", "ok"]
        assert await _counts(session_pool, event.id) == (1, 1)


@pytest.mark.asyncio
async def test_duplicate_waits_for_pending_reservation(
    session_pool, codec, notifier, make_event, make_student, monkeypatch
):
    event = await make_event(capacity=1)
    student = await make_student()
    real_reserve = capacity_module.try_reserve
    reserved = asyncio.Event()

    async def slow_reserve(session, event_id, commit=True):
        if reserved.is_set():
            return await real_reserve(session, event_id, commit=commit)
        outcome = await real_reserve(session, event_id, commit=commit)
        reserved.set()
        # hold the seat before inserting the row
        await asyncio.sleep(0.2)
        return outcome

    monkeypatch.setattr(capacity_module, "try_reserve", slow_reserve)

    async def second_attempt():
        await reserved.wait()
        return await _attempt(session_pool, codec, notifier, student, event.id)

    results = await asyncio.gather(
        _attempt(session_pool, codec, notifier, student, event.id),
        second_attempt(),
    )

    assert results == ["ok", "duplicate"]
    assert await _counts(session_pool, event.id) == (1, 1)


@pytest.mark.asyncio
async def test_unknown_student(session, codec, notifier, make_event):
    event = await make_event(capacity=2)

    with pytest.raises(StudentNotFound):
        await register(session, codec, notifier, Principal(987654, STUDENT), event.id)

    refreshed = await session.get(Event, event.id, populate_existing=True)
    assert refreshed.current_registrations == 0


@pytest.mark.asyncio
async def test_admins_are_notified(session, session_pool, codec, notifier, admin, make_event, make_student):
    event = await make_event(capacity=5, title="Hackathon")
    student = await make_student("Alice")

    await register(session, codec, notifier, student, event.id)
    await notifier.drain()

    rows = await notifications_for(session_pool, admin.id)
    assert len(rows) == 1
    assert rows[0].type == "event_update"
    assert rows[0].event_id == event.id
    assert "Alice" in rows[0].message and "Hackathon" in rows[0].message


@pytest.mark.asyncio
async def test_listings(session, codec, notifier, make_event, make_student):
    first = await make_event(capacity=5, title="Seminar")
    second = await make_event(capacity=5, title="Workshop")
    alice, bob = await make_student("Alice"), await make_student("Bob")

    await register(session, codec, notifier, alice, first.id)
    await register(session, codec, notifier, alice, second.id)
    await register(session, codec, notifier, bob, first.id)

    mine = await list_by_student(session, alice.id)
    assert [ev.title for _, ev in mine] == ["Workshop", "Seminar"]

    roster = await list_by_event(session, first.id)
    assert [student.name for _, student in roster] == ["Bob", "Alice"]


@pytest.mark.asyncio
async def test_export_csv(session, codec, notifier, make_event, make_student):
    event = await make_event(capacity=5)
    alice = await make_student("Alice")
    await register(session, codec, notifier, alice, event.id)

    body = await export_event_csv(session, event.id)
    rows = list(csv.reader(io.StringIO(body.decode("utf-8"))))

    assert rows[0] == CSV_COLUMNS
    assert rows[1][:3] == ["Alice", "student1@college.edu", "CS001"]
    assert rows[1][4] == "Pending"


@pytest.mark.asyncio
async def test_export_without_registrations(session, make_event):
    event = await make_event()
    with pytest.raises(NoRegistrations):
        await export_event_csv(session, event.id)
