from aiohttp import web

from event_pass.appkeys import codec_key, notifier_key
from event_pass.middleware import require_admin, require_student
from event_pass.schemas import event_summary, registration_to_dict, user_summary
from event_pass.services import registrations as registrations_service
from event_pass.services.events import get_event
from event_pass.services.qr import render_qr_data_url
from event_pass.services.reports import export_event_csv

routes = web.RouteTableDef()


@routes.post(r"/api/registrations/{event_id:\d+}")
async def register(request: web.Request) -> web.Response:
    student = require_student(request)
    session = request["session"]
    registration = await registrations_service.register(
        session,
        request.app[codec_key],
        request.app[notifier_key],
        student,
        int(request.match_info["event_id"]),
    )
    event = await get_event(session, registration.event_id)
    return web.json_response(
        {
            "message": "Registration successful",
            "registration": registration_to_dict(registration, event=event_summary(event)),
            "token": registration.token,
            "qrCodeImage": render_qr_data_url(registration.token),
        },
        status=201,
    )


@routes.get("/api/registrations/my-registrations")
async def my_registrations(request: web.Request) -> web.Response:
    student = require_student(request)
    rows = await registrations_service.list_by_student(request["session"], student.id)
    return web.json_response(
        [
            registration_to_dict(
                registration,
                event=event_summary(event),
                token=registration.token,
                qrCodeImage=render_qr_data_url(registration.token),
            )
            for registration, event in rows
        ]
    )


@routes.get(r"/api/registrations/event/{event_id:\d+}")
async def event_registrations(request: web.Request) -> web.Response:
    require_admin(request)
    rows = await registrations_service.list_by_event(request["session"], int(request.match_info["event_id"]))
    return web.json_response(
        [registration_to_dict(registration, student=user_summary(student)) for registration, student in rows]
    )


@routes.get(r"/api/registrations/export/{event_id:\d+}")
async def export_registrations(request: web.Request) -> web.Response:
    require_admin(request)
    body = await export_event_csv(request["session"], int(request.match_info["event_id"]))
    return web.Response(
        body=body,
        content_type="text/csv",
        charset="utf-8",
        headers={"Content-Disposition": 'attachment; filename="registrations.csv"'},
    )
