from .common import routes as common_routes
from .events import routes as events_routes
from .registrations import routes as registrations_routes
from .scan import routes as scan_routes
from .notifications import routes as notifications_routes

__all__ = [
    "common_routes",
    "events_routes",
    "registrations_routes",
    "scan_routes",
    "notifications_routes",
]
