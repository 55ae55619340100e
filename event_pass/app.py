import asyncio
import logging
import sys

from aiogram import Bot
from aiohttp import web

from event_pass.config import settings
from event_pass.db import SessionLocal, init_db
from event_pass.services.notifier import Notifier
from event_pass.services.scheduler import schedule_jobs
from event_pass.services.tokens import TokenCodec
from event_pass.web import create_app


def configure_logging() -> None:
    # Console *and* file under LOG_DIR
    settings.LOG_DIR.mkdir(parents=True, exist_ok=True)
    log_file = settings.LOG_DIR / "event_pass.log"

    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
        force=True,
    )
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.INFO)
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)


async def main() -> None:
    configure_logging()
    logging.info("Event pass service starting…")

    # Create tables and run migrations
    await init_db()

    bot = Bot(token=settings.BOT_TOKEN) if settings.BOT_TOKEN else None
    notifier = Notifier(SessionLocal, bot=bot)
    app = create_app(SessionLocal, TokenCodec(settings.token_secret), notifier)

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host=settings.HOST, port=settings.PORT)
    await site.start()
    logging.info("API listening on http://%s:%d/api", settings.HOST, settings.PORT)

    # Sweep + reminders (the first sweep runs immediately)
    scheduler = schedule_jobs(SessionLocal, notifier)

    try:
        while True:
            await asyncio.sleep(3600)
    finally:
        scheduler.shutdown(wait=False)
        await runner.cleanup()
        if bot is not None:
            await bot.session.close()


def run() -> None:
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
