import asyncio
from unittest.mock import AsyncMock

import pytest

from event_pass.services.notifications import list_for_user, mark_read
from event_pass.services.notifier import Message, Notifier
from event_pass.services.users import create_user
from tests.conftest import notifications_for


@pytest.mark.asyncio
async def test_emit_persists_notification(session_pool, notifier, make_student):
    student = await make_student()

    notifier.emit(student.id, "Hello", "other")
    await notifier.drain()

    rows = await notifications_for(session_pool, student.id)
    assert [(n.message, n.type, n.read, n.deleted) for n in rows] == [("Hello", "other", False, False)]


@pytest.mark.asyncio
async def test_store_failure_does_not_stop_the_worker(session_pool, notifier, make_student):
    student = await make_student()

    notifier.emit(987654, "to nobody")  # violates the user foreign key
    notifier.emit(student.id, "still delivered")
    await notifier.drain()

    assert [n.message for n in await notifications_for(session_pool, student.id)] == ["still delivered"]


@pytest.mark.asyncio
async def test_telegram_push(session, session_pool):
    user = await create_user(session, name="Alice", email="alice@college.edu", tg_id=5550001)
    bot = AsyncMock()
    notifier = Notifier(session_pool, bot=bot, timeout=5)

    await notifier.deliver(Message(user.id, "Reminder", "reminder"))

    bot.send_message.assert_awaited_once_with(5550001, "Reminder")


@pytest.mark.asyncio
async def test_telegram_failure_keeps_in_app_row(session, session_pool):
    user = await create_user(session, name="Bob", email="bob@college.edu", tg_id=5550002)
    bot = AsyncMock()
    bot.send_message.side_effect = asyncio.TimeoutError()
    notifier = Notifier(session_pool, bot=bot, timeout=5)

    await notifier.deliver(Message(user.id, "New event", "new_event"))

    assert len(await notifications_for(session_pool, user.id)) == 1


@pytest.mark.asyncio
async def test_user_without_chat_is_not_pushed(session, session_pool):
    user = await create_user(session, name="Carol", email="carol@college.edu")
    bot = AsyncMock()
    notifier = Notifier(session_pool, bot=bot, timeout=5)

    await notifier.deliver(Message(user.id, "Hi"))

    bot.send_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_drain_requires_running_worker(session_pool):
    with pytest.raises(RuntimeError):
        await Notifier(session_pool).drain()


@pytest.mark.asyncio
async def test_mark_read_only_own(session, notifier, make_student):
    alice, bob = await make_student(), await make_student()
    notifier.emit(alice.id, "For Alice")
    await notifier.drain()
    (notification,) = await list_for_user(session, alice.id)

    assert await mark_read(session, bob.id, notification.id) is False
    assert await mark_read(session, alice.id, notification.id) is True
    (notification,) = await list_for_user(session, alice.id)
    assert notification.read is True
