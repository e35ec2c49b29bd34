from fastapi import Depends, status
from fastapi.security import OAuth2PasswordBearer
from app.core.errors import AuthError
from app.core.permissions import Principal
from app.core.security import decode_access_token
from app.models.user import Role

# Extracts the token from "Authorization: Bearer <token>"; a missing header
# or any other scheme yields None instead of raising
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/login", auto_error=False)


async def get_current_principal(token: str | None = Depends(oauth2_scheme)) -> Principal:
    """
    Resolve the caller's identity from the bearer token.

    The token is self-contained: the user id and role are taken from its
    claims without consulting the database, so a role change only takes
    effect once previously issued tokens expire.
    """
    if not token:
        raise AuthError("No token provided", status_code=status.HTTP_403_FORBIDDEN)

    invalid_token = AuthError("Invalid or expired token")

    payload = decode_access_token(token)
    if payload is None:
        raise invalid_token

    user_id = payload.get("sub")
    if not user_id or not isinstance(user_id, str):
        raise invalid_token

    try:
        role = Role(payload.get("role"))
    except ValueError:
        raise invalid_token

    return Principal(user_id=user_id, role=role)
