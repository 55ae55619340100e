"""Fire-and-forget notifications.

Core operations call :meth:`Notifier.emit` after their own commit. A single
worker task persists each message as a ``notification`` row and, when a bot is
configured and the recipient has a Telegram chat, pushes it there as well.
Nothing in here ever propagates an error back to the emitter.
"""

import asyncio
import logging
from contextlib import suppress
from dataclasses import dataclass
from typing import Optional

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError
from sqlalchemy.ext.asyncio import async_sessionmaker

from event_pass.config import settings
from event_pass.models import Notification, User

logger = logging.getLogger(__name__)


@dataclass
class Message:
    recipient_id: int
    text: str
    type: str = "other"
    event_id: Optional[int] = None


class Notifier:
    def __init__(
        self,
        session_pool: async_sessionmaker,
        bot: Optional[Bot] = None,
        timeout: Optional[float] = None,
    ):
        self._session_pool = session_pool
        self._bot = bot
        self._timeout = timeout if timeout is not None else settings.NOTIFIER_TIMEOUT_SECONDS
        self._queue: asyncio.Queue[Message] = asyncio.Queue()
        self._worker: Optional[asyncio.Task] = None

    def emit(self, recipient_id: int, text: str, type: str = "other", event_id: Optional[int] = None) -> None:
        self._queue.put_nowait(Message(recipient_id, text, type, event_id))

    def start(self) -> None:
        if self._worker is None:
            self._worker = asyncio.create_task(self._run(), name="notifier")

    async def stop(self) -> None:
        if self._worker is None:
            return
        self._worker.cancel()
        with suppress(asyncio.CancelledError):
            await self._worker
        self._worker = None

    async def drain(self) -> None:
        """Wait until every emitted message has been handled."""
        if self._worker is None:
            raise RuntimeError("notifier is not running")
        await self._queue.join()

    async def _run(self) -> None:
        while True:
            message = await self._queue.get()
            try:
                await self.deliver(message)
            except Exception:
                logger.exception(
                    "Failed to deliver %s notification to user %s",
                    message.type,
                    message.recipient_id,
                )
            finally:
                self._queue.task_done()

    async def deliver(self, message: Message) -> None:
        async with self._session_pool() as session:
            session.add(
                Notification(
                    user_id=message.recipient_id,
                    message=message.text,
                    type=message.type,
                    event_id=message.event_id,
                )
            )
            await asyncio.wait_for(session.commit(), self._timeout)

            if self._bot is None:
                return
            user = await session.get(User, message.recipient_id)

        if user is None or user.tg_id is None:
            return
        try:
            await asyncio.wait_for(self._bot.send_message(user.tg_id, message.text), self._timeout)
        except (TelegramAPIError, asyncio.TimeoutError) as exc:
            # best effort: the in-app row is already stored
            logger.warning("Telegram push to user %s failed: %s", message.recipient_id, exc)
