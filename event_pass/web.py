from aiohttp import web
from sqlalchemy.ext.asyncio import async_sessionmaker

from event_pass.appkeys import codec_key, notifier_key, session_pool_key
from event_pass.handlers import (
    common_routes,
    events_routes,
    notifications_routes,
    registrations_routes,
    scan_routes,
)
from event_pass.handlers.errors import error_middleware
from event_pass.middleware import auth_middleware, db_session_middleware
from event_pass.services.notifier import Notifier
from event_pass.services.tokens import TokenCodec


async def _start_notifier(app: web.Application) -> None:
    app[notifier_key].start()


async def _stop_notifier(app: web.Application) -> None:
    await app[notifier_key].stop()


def create_app(session_pool: async_sessionmaker, codec: TokenCodec, notifier: Notifier) -> web.Application:
    app = web.Application(middlewares=[error_middleware, auth_middleware, db_session_middleware])
    app[session_pool_key] = session_pool
    app[codec_key] = codec
    app[notifier_key] = notifier

    # Routes
    app.router.add_routes(common_routes)
    app.router.add_routes(events_routes)
    app.router.add_routes(registrations_routes)
    app.router.add_routes(scan_routes)
    app.router.add_routes(notifications_routes)

    app.on_startup.append(_start_notifier)
    app.on_cleanup.append(_stop_notifier)
    return app
