from aiohttp import web

from event_pass.errors import Forbidden, Unauthorized
from event_pass.models.user import ADMIN, STUDENT
from event_pass.services.auth import Principal, decode_principal


@web.middleware
async def auth_middleware(request: web.Request, handler):
    principal = None
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        principal = decode_principal(header[len("Bearer "):].strip())
    request["principal"] = principal
    return await handler(request)


def require_principal(request: web.Request) -> Principal:
    principal = request.get("principal")
    if principal is None:
        raise Unauthorized()
    return principal


def _require_role(request: web.Request, role: str) -> Principal:
    principal = require_principal(request)
    if principal.role != role:
        raise Forbidden()
    return principal


def require_admin(request: web.Request) -> Principal:
    return _require_role(request, ADMIN)


def require_student(request: web.Request) -> Principal:
    return _require_role(request, STUDENT)
