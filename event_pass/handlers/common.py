from aiohttp import web

from event_pass.errors import EventPassError

routes = web.RouteTableDef()


async def read_json(request: web.Request) -> dict:
    try:
        body = await request.json()
    except ValueError as exc:
        raise EventPassError("Request body must be valid JSON") from exc
    if not isinstance(body, dict):
        raise EventPassError("Request body must be a JSON object")
    return body


@routes.get("/api/health")
async def health(request: web.Request) -> web.Response:
    return web.json_response({"status": "ok"})
