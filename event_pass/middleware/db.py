from aiohttp import web

from event_pass.appkeys import session_pool_key


@web.middleware
async def db_session_middleware(request: web.Request, handler):
    """Open one ``AsyncSession`` per request as ``request["session"]``."""
    async with request.app[session_pool_key]() as session:
        request["session"] = session
        return await handler(request)
