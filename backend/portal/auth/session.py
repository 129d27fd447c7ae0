"""Session token encoding and decoding.

The session cookie holds a compact HS256 JWS whose claims are the
``SessionUser`` fields plus:
  - iat:  issued-at timestamp
  - exp:  issued-at + 7 days

``decrypt`` never raises: an expired, tampered, wrongly-signed or malformed
token is simply "no session". ``encrypt`` raises ``EncodingError``, which is
a server fault.
"""

import logging
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from jose.exceptions import JOSEError

from portal.config import Settings

logger = logging.getLogger(__name__)

TOKEN_LIFETIME = timedelta(days=7)


class EncodingError(Exception):
    """The session claims could not be signed."""


def encrypt(payload: dict, settings: Settings) -> str:
    if not settings.secret_key:
        raise EncodingError("Failed to encrypt session data: no secret key configured")

    now = datetime.now(timezone.utc)
    claims = {
        **payload,
        "iat": int(now.timestamp()),
        "exp": int((now + TOKEN_LIFETIME).timestamp()),
    }
    try:
        return jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)
    except (JWTError, TypeError, ValueError) as exc:
        logger.error("Session encryption error: %s", exc)
        raise EncodingError("Failed to encrypt session data") from exc


def decrypt(token: str, settings: Settings) -> dict | None:
    """Verify signature, algorithm and expiry. Returns the claims or None."""
    if not token or not settings.secret_key:
        return None
    try:
        return jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except (JOSEError, TypeError, ValueError) as exc:
        logger.debug("Session decryption failed: %s", exc)
        return None
