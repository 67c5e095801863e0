"""
Bearer token verification.

Tokens are issued by the account service that fronts this API; here they are
only checked and turned into a caller identity.
"""
import structlog
from jose import JWTError, jwt

from shared.config import settings
from .roles import CurrentUser, Role

logger = structlog.get_logger(__name__)

SECRET_KEY = settings.JWT_SECRET_KEY
if not SECRET_KEY:
    raise ValueError("FATAL ERROR: JWT_SECRET_KEY is not set in the environment!")

ALGORITHM = settings.JWT_ALGORITHM


def verify_access_token(token: str) -> dict | None:
    """Claims of a valid, unexpired token that names a subject. None otherwise."""
    try:
        claims = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as exc:
        logger.debug("token_rejected", error=str(exc))
        return None
    if not claims.get("sub"):
        return None
    return claims


def caller_from_token(token: str) -> CurrentUser | None:
    claims = verify_access_token(token)
    if claims is None:
        return None
    try:
        role = Role(claims.get("role", Role.MEMBER.value))
    except ValueError:
        logger.warning("token_unknown_role", role=claims.get("role"))
        return None
    return CurrentUser(id=str(claims["sub"]), role=role)
