"""JWT verification for tokens issued by the external identity provider.

This service never issues tokens. It checks the HS256 signature against the
shared JWT_SECRET, the expiry, and (when JWT_AUDIENCE is set) the audience.
The subject claim is the user id.
"""

from typing import Any

from jose import JWTError, jwt

from config.settings import settings
from src.au_common.errors import InvalidCredentialsError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"


def decode_token(token: str) -> dict[str, Any]:
    """Decode and validate an access token.

    Returns:
        Decoded payload with at minimum {"sub": ...}.

    Raises:
        InvalidCredentialsError: bad signature, expired, wrong audience,
                                 or no subject.
    """
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
            audience=settings.JWT_AUDIENCE,
            options={"verify_aud": settings.JWT_AUDIENCE is not None},
        )
    except JWTError:
        raise InvalidCredentialsError() from None

    if not payload.get("sub"):
        raise InvalidCredentialsError()
    return payload
