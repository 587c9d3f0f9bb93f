"""
Signed cookie codec.

Values are carried as ``payload.signature`` where ``signature`` is the
standard base64 encoding of HMAC-SHA256(secret, payload). Nothing about expiry
is embedded in the signature; the cookie's own max-age bounds its lifetime.
"""

import base64
import hashlib
import hmac
import json
import logging
from typing import Optional
from urllib.parse import quote, unquote

from fastapi import Response
from pydantic import ValidationError

from meetlink.constants import COOKIE_MAX_AGE, COOKIE_NAME
from meetlink.schemas.session import UserSession

logger = logging.getLogger(__name__)

SEPARATOR = "."


def sign_value(value: str, secret: str) -> str:
    """
    Sign a value with HMAC-SHA256.

    Args:
        value: Opaque payload to sign
        secret: Signing key

    Returns:
        str: ``value.signature``
    """
    digest = hmac.new(secret.encode("utf-8"), value.encode("utf-8"), hashlib.sha256).digest()
    signature = base64.b64encode(digest).decode("ascii")
    return f"{value}{SEPARATOR}{signature}"


def verify_value(signed: str, secret: str) -> Optional[str]:
    """
    Verify a signed value and extract its payload.

    The payload is everything before the last separator. The whole signed
    string is recomputed from that payload and compared, so any change to
    either segment (including one that moves the last separator) fails.

    Args:
        signed: String produced by sign_value
        secret: Signing key

    Returns:
        Optional[str]: The payload, or None if the value is not validly signed
    """
    if not signed:
        return None
    last_sep = signed.rfind(SEPARATOR)
    if last_sep == -1:
        return None
    value = signed[:last_sep]
    expected = sign_value(value, secret)
    if not hmac.compare_digest(expected.encode("utf-8"), signed.encode("utf-8")):
        return None
    return value


def encode_session(session: UserSession, secret: str) -> str:
    """Serialize and sign a session."""
    payload = json.dumps(session.model_dump(by_alias=True), separators=(",", ":"))
    return sign_value(payload, secret)


def session_cookie_value(session: UserSession, secret: str) -> str:
    """Signed session, percent-encoded so the JSON survives as a cookie value."""
    return quote(encode_session(session, secret), safe="")


def decode_session(raw: Optional[str], secret: str) -> Optional[UserSession]:
    """
    Read a session out of a raw cookie value.

    Returns None for a missing cookie, a bad signature, or a payload that is
    not a valid session document.
    """
    if not raw:
        return None
    payload = verify_value(unquote(raw), secret)
    if payload is None:
        logger.debug("Session cookie failed signature verification")
        return None
    try:
        return UserSession.model_validate_json(payload)
    except ValidationError:
        logger.warning("Session cookie has a valid signature but an invalid payload")
        return None


def set_session_cookie(response: Response, session: UserSession, secret: str, secure: bool = True) -> None:
    """Write the signed session cookie onto a response."""
    response.set_cookie(
        COOKIE_NAME,
        session_cookie_value(session, secret),
        max_age=COOKIE_MAX_AGE,
        path="/",
        httponly=True,
        secure=secure,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    """Remove the session cookie."""
    response.delete_cookie(COOKIE_NAME, path="/")
