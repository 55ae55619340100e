from aiohttp import web

from event_pass.appkeys import codec_key
from event_pass.handlers.common import read_json
from event_pass.middleware import require_admin
from event_pass.models import Event, User
from event_pass.schemas import ScanRequest, event_summary, registration_to_dict, user_summary
from event_pass.services.scan import scan
from event_pass.utils.time import isoformat_utc

routes = web.RouteTableDef()


@routes.post("/api/scan")
async def scan_pass(request: web.Request) -> web.Response:
    admin = require_admin(request)
    body = ScanRequest.model_validate(await read_json(request))
    session = request["session"]

    result = await scan(session, request.app[codec_key], body.token, admin.id)
    registration = result.registration
    payload = registration_to_dict(
        registration,
        student=user_summary(await session.get(User, registration.student_id)),
        event=event_summary(await session.get(Event, registration.event_id)),
    )

    if result.already_scanned:
        return web.json_response(
            {
                "message": "QR code already used",
                "scannedAt": isoformat_utc(result.scanned_at),
                "registration": payload,
            },
            status=400,
        )
    return web.json_response({"message": "Entry verified successfully", "registration": payload})
