from datetime import datetime
from typing import List, Optional

from sqlalchemy import asc, delete, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from event_pass.errors import EventPassError, NotFound
from event_pass.models import Event, Notification, Registration
from event_pass.models.user import STUDENT
from event_pass.services.auth import Principal
from event_pass.services.notifier import Notifier
from event_pass.services.users import list_by_role
from event_pass.utils.time import to_naive_utc, utcnow

# Fields an administrator may change after creation. Status and the deletion
# timestamp belong to the lifecycle sweeper.
EDITABLE_FIELDS = {"title", "description", "date", "venue", "capacity", "poster_url"}


class EventNotFound(NotFound):
    message = "Event not found"


class InvalidEvent(EventPassError):
    message = "Invalid event data"


def _require_text(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise InvalidEvent(f"{field} is required.")
    return value.strip()


async def create_event(
    session: AsyncSession,
    notifier: Notifier,
    creator: Principal,
    title: str,
    description: str,
    date: datetime,
    venue: str,
    capacity: int,
    poster_url: str = "",
) -> Event:
    event_date = to_naive_utc(date)
    if event_date < utcnow():
        raise InvalidEvent("Cannot create an event in the past.")
    if capacity < 1:
        raise InvalidEvent("Capacity must be at least 1.")

    new_event = Event(
        title=_require_text(title, "Title"),
        description=_require_text(description, "Description"),
        date=event_date,
        venue=_require_text(venue, "Venue"),
        capacity=capacity,
        poster_url=poster_url or "",
        created_by=creator.id,
    )
    session.add(new_event)
    await session.commit()
    await session.refresh(new_event)

    for student in await list_by_role(session, STUDENT):
        notifier.emit(
            student.id,
            f"New event: {new_event.title} on {new_event.date:%d %b %Y %H:%M} at {new_event.venue}",
            "new_event",
            new_event.id,
        )
    return new_event


async def get_event(session: AsyncSession, event_id: int) -> Event:
    event = await session.get(Event, event_id, populate_existing=True)
    if event is None:
        raise EventNotFound()
    return event


async def list_events(session: AsyncSession) -> List[Event]:
    result = await session.execute(
        select(Event).order_by(asc(Event.date), asc(Event.id))  # type: ignore[arg-type]
    )
    return list(result.scalars().all())


async def update_event(session: AsyncSession, notifier: Notifier, event_id: int, **changes) -> Event:
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise InvalidEvent(f"Cannot update: {', '.join(sorted(unknown))}")

    event = await get_event(session, event_id)
    for field in ("title", "description", "venue"):
        if field in changes:
            changes[field] = _require_text(changes[field], field.capitalize())
    if "date" in changes:
        changes["date"] = to_naive_utc(changes["date"])
    if "capacity" in changes:
        if changes["capacity"] < 1:
            raise InvalidEvent("Capacity must be at least 1.")
        if changes["capacity"] < event.current_registrations:
            raise InvalidEvent("Capacity cannot be lower than the number of registrations.")

    for key, value in changes.items():
        setattr(event, key, value)
    session.add(event)
    try:
        await session.commit()
    except IntegrityError as exc:
        # a registration slipped in between the check and the commit
        await session.rollback()
        raise InvalidEvent("Capacity cannot be lower than the number of registrations.") from exc

    event = await get_event(session, event_id)
    if changes:
        student_ids = (
            await session.execute(
                select(Registration.student_id).where(Registration.event_id == event_id)  # type: ignore[arg-type]
            )
        ).scalars().all()
        for student_id in student_ids:
            notifier.emit(student_id, f"Event updated: {event.title}", "event_update", event_id)
    return event


async def purge_event(session: AsyncSession, event_id: int) -> bool:
    """Delete an event with its registrations; its notifications are only flagged.

    Runs as one transaction. Returns ``False`` if the event was already gone.
    """
    await session.execute(
        delete(Registration).where(Registration.event_id == event_id)  # type: ignore[arg-type]
    )
    await session.execute(
        update(Notification)
        .where(Notification.event_id == event_id)  # type: ignore[arg-type]
        .values(deleted=True)
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(
        delete(Event).where(Event.id == event_id)  # type: ignore[arg-type]
    )
    await session.commit()
    return result.rowcount == 1


async def delete_event(session: AsyncSession, event_id: int) -> None:
    if not await purge_event(session, event_id):
        raise EventNotFound()
