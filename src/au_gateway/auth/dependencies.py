"""FastAPI dependencies: get_current_user, require_admin.

Usage in any protected router:
    from src.au_gateway.auth.dependencies import get_current_user

    @router.post("/protected")
    async def protected(user: UserModel = Depends(get_current_user)):
        ...
"""

import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.au_common.database import get_db_session
from src.au_common.errors import AccountBannedError, AuthorizationError, InvalidCredentialsError
from src.au_gateway.auth.jwt_handler import decode_token
from src.au_gateway.user.db_models import AdminModel, UserModel

# Tokens come from the identity provider; tokenUrl only feeds Swagger UI.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> UserModel:
    """Validate the Bearer token and return the UserModel.

    Raises HTTP 401 if the token is invalid or names no known user.
    Raises AccountBannedError (403) for banned users.
    """
    try:
        payload = decode_token(token)
        user_id = uuid.UUID(str(payload["sub"]))
    except (InvalidCredentialsError, ValueError):
        raise _CREDENTIALS_EXCEPTION from None

    result = await db.execute(select(UserModel).where(UserModel.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise _CREDENTIALS_EXCEPTION

    if user.is_banned:
        raise AccountBannedError()

    return user


async def require_admin(
    current_user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> UserModel:
    """Verify the caller holds the admin role (a row in `admins`).

    Raises AuthorizationError (403, code 1002) otherwise.
    """
    result = await db.execute(
        select(AdminModel.id).where(AdminModel.user_id == current_user.id)
    )
    if result.scalar_one_or_none() is None:
        raise AuthorizationError("Admin role required")
    return current_user
