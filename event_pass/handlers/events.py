from aiohttp import web

from event_pass.appkeys import notifier_key
from event_pass.handlers.common import read_json
from event_pass.middleware import require_admin
from event_pass.schemas import EventCreate, EventUpdate, event_to_dict
from event_pass.services import events as events_service

routes = web.RouteTableDef()


@routes.get("/api/events")
async def list_events(request: web.Request) -> web.Response:
    events = await events_service.list_events(request["session"])
    return web.json_response([event_to_dict(ev) for ev in events])


@routes.get(r"/api/events/{event_id:\d+}")
async def get_event(request: web.Request) -> web.Response:
    event = await events_service.get_event(request["session"], int(request.match_info["event_id"]))
    return web.json_response(event_to_dict(event))


@routes.post("/api/events")
async def create_event(request: web.Request) -> web.Response:
    admin = require_admin(request)
    body = EventCreate.model_validate(await read_json(request))
    event = await events_service.create_event(
        request["session"],
        request.app[notifier_key],
        admin,
        title=body.title,
        description=body.description,
        date=body.date,
        venue=body.venue,
        capacity=body.capacity,
        poster_url=body.poster_url,
    )
    return web.json_response(
        {"message": "Event created successfully", "event": event_to_dict(event)},
        status=201,
    )


@routes.put(r"/api/events/{event_id:\d+}")
async def update_event(request: web.Request) -> web.Response:
    require_admin(request)
    body = EventUpdate.model_validate(await read_json(request))
    event = await events_service.update_event(
        request["session"],
        request.app[notifier_key],
        int(request.match_info["event_id"]),
        **body.model_dump(exclude_unset=True, exclude_none=True),
    )
    return web.json_response({"message": "Event updated successfully", "event": event_to_dict(event)})


@routes.delete(r"/api/events/{event_id:\d+}")
async def delete_event(request: web.Request) -> web.Response:
    require_admin(request)
    await events_service.delete_event(request["session"], int(request.match_info["event_id"]))
    return web.json_response({"message": "Event deleted successfully"})
