from .jwt_handler import caller_from_token, verify_access_token
from .dependencies import get_current_user, require_roles
from .rate_limiter import limiter, user_id_or_ip
from .roles import CurrentUser, Role

__all__ = [
    "caller_from_token",
    "verify_access_token",
    "get_current_user",
    "require_roles",
    "limiter",
    "user_id_or_ip",
    "CurrentUser",
    "Role"
]
