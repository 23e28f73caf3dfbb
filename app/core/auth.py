# app/core/auth.py
import base64
import hashlib
import hmac
import json
import logging
import time
from typing import Optional

from app.core.config import settings

logger = logging.getLogger(__name__)

# Session lifetime (1 week); the cookie max_age in routes_auth mirrors this.
SESSION_EXP_SECONDS = 7 * 24 * 60 * 60
SESSION_COOKIE = "session_token"


def b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode().rstrip("=")


def b64url_decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(payload_b64: str) -> bytes:
    return hmac.new(settings.SECRET_KEY.encode(), payload_b64.encode(), hashlib.sha256).digest()


def create_session_token(guid: str, *, now: Optional[int] = None) -> str:
    """Signed `<payload>.<sig>` token carrying the Yahoo GUID of the signed-in manager."""
    issued = int(now if now is not None else time.time())
    payload = {"sub": guid, "iat": issued, "exp": issued + SESSION_EXP_SECONDS}
    payload_b64 = b64url_encode(json.dumps(payload, separators=(",", ":")).encode())
    return f"{payload_b64}.{b64url_encode(_sign(payload_b64))}"


def decode_session_token(token: str) -> Optional[str]:
    """Return the GUID for a valid, unexpired token; None otherwise."""
    payload_b64, sep, signature_b64 = (token or "").partition(".")
    if not sep or not payload_b64 or not signature_b64:
        return None
    try:
        signature = b64url_decode(signature_b64)
        payload = json.loads(b64url_decode(payload_b64))
    except (ValueError, TypeError):
        return None
    if not hmac.compare_digest(_sign(payload_b64), signature):
        logger.info("Rejected session token with bad signature")
        return None
    if not isinstance(payload, dict) or payload.get("exp", 0) < time.time():
        return None
    sub = payload.get("sub")
    return sub if isinstance(sub, str) and sub else None
