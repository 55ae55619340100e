import logging

from aiohttp import web
from pydantic import ValidationError

from event_pass.errors import EventPassError

logger = logging.getLogger(__name__)


@web.middleware
async def error_middleware(request: web.Request, handler):
    """Turn domain errors into JSON responses; anything unexpected is a 500."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except EventPassError as exc:
        return web.json_response({"message": str(exc)}, status=exc.status)
    except ValidationError as exc:
        return web.json_response(
            {
                "message": "Invalid request body",
                "errors": exc.errors(include_url=False, include_context=False, include_input=False),
            },
            status=400,
        )
    except Exception:
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return web.json_response({"message": "Something went wrong!"}, status=500)
