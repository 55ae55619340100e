from .auth import auth_middleware, require_admin, require_principal, require_student
from .db import db_session_middleware

__all__ = [
    "auth_middleware",
    "db_session_middleware",
    "require_admin",
    "require_principal",
    "require_student",
]
