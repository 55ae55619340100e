import logging
from datetime import datetime, timedelta
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel import select

from event_pass.config import settings
from event_pass.models import Event, EventStatus, Registration
from event_pass.services.notifier import Notifier
from event_pass.services.sweeper import Sweeper
from event_pass.utils.time import utcnow

logger = logging.getLogger(__name__)


async def run_sweep(sweeper: Sweeper) -> None:
    """Scheduled entry point; a failed pass waits for the next tick."""
    try:
        await sweeper.sweep()
    except Exception:
        logger.exception("Event cleanup sweep failed")


async def send_event_reminders(
    session_pool: async_sessionmaker,
    notifier: Notifier,
    now: Optional[datetime] = None,
) -> int:
    """Remind registered students of events starting in about a day.

    Runs hourly; the window is ``REMINDER_LEAD_HOURS`` ± ``REMINDER_WINDOW_MINUTES``
    and half-open so consecutive runs don't overlap.
    """
    now = now or utcnow()
    lead = timedelta(hours=settings.REMINDER_LEAD_HOURS)
    window = timedelta(minutes=settings.REMINDER_WINDOW_MINUTES)

    sent = 0
    async with session_pool() as session:
        events = (
            await session.execute(
                select(Event).where(
                    Event.status == EventStatus.UPCOMING,  # type: ignore[arg-type]
                    Event.date >= now + lead - window,  # type: ignore[operator]
                    Event.date < now + lead + window,  # type: ignore[operator]
                )
            )
        ).scalars().all()

        for ev in events:
            student_ids = (
                await session.execute(
                    select(Registration.student_id).where(Registration.event_id == ev.id)  # type: ignore[arg-type]
                )
            ).scalars().all()
            for student_id in student_ids:
                notifier.emit(
                    student_id,
                    f"Reminder: {ev.title} starts on {ev.date:%d %b %Y %H:%M} at {ev.venue}. See you there!",
                    "reminder",
                    ev.id,
                )
                sent += 1

    if sent:
        logger.info("Queued %d reminders", sent)
    return sent


async def run_reminders(session_pool: async_sessionmaker, notifier: Notifier) -> None:
    try:
        await send_event_reminders(session_pool, notifier)
    except Exception:
        logger.exception("Reminder job failed")


def schedule_jobs(session_pool: async_sessionmaker, notifier: Notifier) -> AsyncIOScheduler:
    sweeper = Sweeper(session_pool)
    scheduler = AsyncIOScheduler(timezone=settings.TIMEZONE)
    # Once right away, then every day at midnight
    scheduler.add_job(run_sweep, args=[sweeper], id="event_cleanup_startup")
    scheduler.add_job(run_sweep, "cron", hour=0, minute=0, args=[sweeper], id="event_cleanup")
    scheduler.add_job(run_reminders, "cron", minute=0, args=[session_pool, notifier], id="event_reminders")
    scheduler.start()
    return scheduler
