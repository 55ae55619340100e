"""Time-driven event lifecycle.

One pass runs three steps in order, each re-querying the store, so an event
whose date is long gone goes upcoming -> ongoing -> completed -> deleted in a
single pass:

1. upcoming events whose date has arrived become ongoing;
2. ongoing events whose date has passed become completed and get a deletion
   date ``CLEANUP_GRACE_DAYS`` after their start;
3. events past their deletion date are purged.

Every event is handled in its own session; a failure is logged and the pass
moves on. The failed event is picked up again by the next pass.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Awaitable, Callable, List, Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import select

from event_pass.config import settings
from event_pass.models import Event, EventStatus
from event_pass.services.events import purge_event
from event_pass.utils.time import utcnow

logger = logging.getLogger(__name__)


@dataclass
class SweepReport:
    promoted: int = 0
    completed: int = 0
    purged: int = 0
    failed: int = 0


async def _event_ids(session_pool: async_sessionmaker, *conditions) -> List[int]:
    async with session_pool() as session:
        result = await session.execute(select(Event.id).where(*conditions).order_by(Event.id))  # type: ignore[arg-type]
        return list(result.scalars().all())


async def _promote(session: AsyncSession, event_id: int, now: datetime) -> bool:
    result = await session.execute(
        update(Event)
        .where(Event.id == event_id, Event.status == EventStatus.UPCOMING)  # type: ignore[arg-type]
        .values(status=EventStatus.ONGOING)
        .execution_options(synchronize_session=False)
    )
    await session.commit()
    return result.rowcount == 1


class Sweeper:
    def __init__(
        self,
        session_pool: async_sessionmaker,
        grace: Optional[timedelta] = None,
    ):
        self._session_pool = session_pool
        self._grace = grace if grace is not None else timedelta(days=settings.CLEANUP_GRACE_DAYS)

    async def _complete(self, session: AsyncSession, event_id: int, now: datetime) -> bool:
        event = await session.get(Event, event_id)
        if event is None:
            return False
        result = await session.execute(
            update(Event)
            .where(Event.id == event_id, Event.status == EventStatus.ONGOING)  # type: ignore[arg-type]
            .values(status=EventStatus.COMPLETED, scheduled_for_deletion=event.date + self._grace)
            .execution_options(synchronize_session=False)
        )
        await session.commit()
        return result.rowcount == 1

    async def _purge(self, session: AsyncSession, event_id: int, now: datetime) -> bool:
        return await purge_event(session, event_id)

    async def _each(
        self,
        step: Callable[[AsyncSession, int, datetime], Awaitable[bool]],
        event_ids: List[int],
        now: datetime,
        report: SweepReport,
    ) -> int:
        done = 0
        for event_id in event_ids:
            try:
                async with self._session_pool() as session:
                    if await step(session, event_id, now):
                        done += 1
            except Exception:
                report.failed += 1
                logger.exception("Sweep step %s failed for event %s", step.__name__, event_id)
        return done

    async def sweep(self, now: Optional[datetime] = None) -> SweepReport:
        now = now or utcnow()
        report = SweepReport()

        ids = await _event_ids(self._session_pool, Event.status == EventStatus.UPCOMING, Event.date <= now)
        report.promoted = await self._each(_promote, ids, now, report)

        ids = await _event_ids(self._session_pool, Event.status == EventStatus.ONGOING, Event.date < now)
        report.completed = await self._each(self._complete, ids, now, report)

        ids = await _event_ids(
            self._session_pool,
            Event.scheduled_for_deletion.is_not(None),  # type: ignore[union-attr]
            Event.scheduled_for_deletion <= now,  # type: ignore[operator]
        )
        report.purged = await self._each(self._purge, ids, now, report)

        logger.info(
            "Sweep done: %d promoted, %d completed, %d purged, %d failed",
            report.promoted,
            report.completed,
            report.purged,
            report.failed,
        )
        return report
