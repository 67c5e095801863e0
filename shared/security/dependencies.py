from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from shared.errors import ForbiddenError, UnauthorizedError
from .jwt_handler import caller_from_token
from .roles import CurrentUser, Role

# Defines the expected header format (Bearer <token>)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)

async def get_current_user(request: Request, token: str = Depends(oauth2_scheme)) -> CurrentUser:
    """Dependency to validate the JWT and return the caller's id and role."""
    user = caller_from_token(token) if token else None
    if user is None:
        raise UnauthorizedError()

    # Store in request state for downstream use (like rate limiting)
    request.state.user_id = user.id
    return user

def require_roles(*roles: Role):
    """Dependency factory: the caller must hold one of ``roles``."""
    async def check_role(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in roles:
            raise ForbiddenError()
        return user
    return check_role
