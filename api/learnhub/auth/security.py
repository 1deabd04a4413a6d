"""Session token verification.

Session tokens are issued by the external identity provider. The API only
verifies them: signature, expiry, optional issuer, and a subject claim.
"""

from typing import Any

from jose import JWTError, jwt

from learnhub.config.settings import get_settings


def decode_session_token(token: str) -> dict[str, Any]:
    """Decode and validate a session token.

    Args:
        token: JWT string from the Authorization header

    Returns:
        Decoded payload dictionary

    Raises:
        JWTError: If token is invalid, expired, or has no subject
    """
    settings = get_settings()

    options = {"verify_aud": False, "verify_iss": settings.auth_issuer is not None}
    payload = jwt.decode(
        token,
        settings.auth_jwt_key,
        algorithms=[settings.auth_algorithm],
        issuer=settings.auth_issuer,
        options=options,
    )

    if not payload.get("sub"):
        msg = "Session token has no subject"
        raise JWTError(msg)

    return payload
