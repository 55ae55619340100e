from aiohttp import web

from event_pass.errors import NotFound
from event_pass.middleware import require_principal
from event_pass.schemas import notification_to_dict
from event_pass.services import notifications as notifications_service

routes = web.RouteTableDef()


@routes.get("/api/notifications")
async def list_notifications(request: web.Request) -> web.Response:
    principal = require_principal(request)
    items = await notifications_service.list_for_user(request["session"], principal.id)
    return web.json_response([notification_to_dict(n) for n in items])


@routes.post(r"/api/notifications/{notification_id:\d+}/read")
async def mark_read(request: web.Request) -> web.Response:
    principal = require_principal(request)
    ok = await notifications_service.mark_read(
        request["session"], principal.id, int(request.match_info["notification_id"])
    )
    if not ok:
        raise NotFound("Notification not found")
    return web.json_response({"message": "Notification marked as read"})
