from aiohttp import web
from sqlalchemy.ext.asyncio import async_sessionmaker

from event_pass.services.notifier import Notifier
from event_pass.services.tokens import TokenCodec

session_pool_key = web.AppKey("session_pool", async_sessionmaker)
codec_key = web.AppKey("codec", TokenCodec)
notifier_key = web.AppKey("notifier", Notifier)
