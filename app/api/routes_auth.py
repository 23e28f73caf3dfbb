# app/api/routes_auth.py
import json
import logging
import secrets

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse
from oauthlib.oauth2.rfc6749.errors import InvalidGrantError, OAuth2Error
from sqlalchemy.orm import Session

from app.core.auth import SESSION_COOKIE, SESSION_EXP_SECONDS, b64url_decode, b64url_encode, create_session_token
from app.core.config import settings
from app.db.session import get_db
from app.deps import get_current_user
from app.services.yahoo.oauth import exchange_token, get_authorization_url, persist_token
from app.services.yahoo.users import get_user, upsert_user_from_yahoo

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

STATE_COOKIE = "oauth_state"


# state = "<csrf>.<b64 json {r: return_to, u: redirect_uri}>"
def _pack_state(return_to: str, redirect_uri: str) -> str:
    body = json.dumps({"r": return_to, "u": redirect_uri}, separators=(",", ":")).encode()
    return f"{secrets.token_urlsafe(24)}.{b64url_encode(body)}"


def _unpack_state(state: str) -> dict | None:
    _, sep, body = state.partition(".")
    if not sep:
        return None
    try:
        payload = json.loads(b64url_decode(body))
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None


def _normalize_return_to(rt: str | None) -> str:
    """Absolute http(s) URLs pass through; paths are joined onto the frontend URL."""
    frontend = settings.frontend_url.rstrip("/")
    base = (rt or f"{frontend}/leagues").strip()
    if base.startswith("http://") or base.startswith("https://"):
        return base
    return f"{frontend}/{base.lstrip('/')}"


def _cookie_params() -> dict:
    # SameSite=None requires Secure; only non-local deployments serve the FE cross-site
    return {
        "secure": settings.COOKIE_SECURE,
        "httponly": True,
        "samesite": "none" if settings.COOKIE_SECURE else "lax",
        "path": "/",
        "max_age": SESSION_EXP_SECONDS,
    }


# -------------------------------------------------------------------
# Routes
# -------------------------------------------------------------------
@router.get("/login")
def auth_login(
    request: Request,
    debug: bool = False,
    return_to: str | None = Query(default=None),
):
    redirect_uri = (settings.YAHOO_REDIRECT_URI or "").strip()
    if not redirect_uri:
        raise HTTPException(500, "YAHOO_REDIRECT_URI missing")

    return_to = _normalize_return_to(return_to)

    state = _pack_state(return_to, redirect_uri)
    authorize_url = get_authorization_url(state, redirect_uri)

    if debug:
        return JSONResponse({
            "using_redirect_uri": redirect_uri,
            "authorize_url": authorize_url,
            "state": state,
            "env": settings.APP_ENV,
            "return_to": return_to,
        })

    resp = RedirectResponse(authorize_url, status_code=302)
    resp.set_cookie(
        key=STATE_COOKIE,
        value=state,
        httponly=True,
        secure=(request.url.scheme == "https"),
        max_age=600,
        samesite="lax",
        path="/",
    )
    return resp


@router.get("/callback")
def auth_callback(
    request: Request,
    code: str,
    state: str,
    db: Session = Depends(get_db),
):
    cookie_state = request.cookies.get(STATE_COOKIE)
    if not cookie_state or cookie_state != state:
        raise HTTPException(400, "Invalid or missing OAuth state")

    payload = _unpack_state(state)
    if payload is None:
        raise HTTPException(400, "Malformed OAuth state")

    return_to = _normalize_return_to(payload.get("r"))
    redirect_uri = payload.get("u")
    if not isinstance(redirect_uri, str) or not redirect_uri:
        raise HTTPException(400, "Missing redirect_uri in state")

    try:
        token = exchange_token(code, redirect_uri)
    except InvalidGrantError:
        # stale code; start over
        return RedirectResponse(url="/auth/login", status_code=302)
    except OAuth2Error as e:
        raise HTTPException(status_code=400, detail=f"Token exchange failed: {e}")

    try:
        profile = upsert_user_from_yahoo(db, access_token=token["access_token"])
    except RuntimeError as e:
        raise HTTPException(status_code=502, detail=str(e))
    guid = profile["guid"]
    persist_token(db, guid, token)
    logger.info("User %s signed in", guid)

    resp = RedirectResponse(return_to, status_code=302)
    resp.set_cookie(SESSION_COOKIE, create_session_token(guid), **_cookie_params())
    resp.delete_cookie(STATE_COOKIE, path="/")
    return resp


@router.post("/logout")
def auth_logout():
    resp = JSONResponse({"message": "Logged out"})
    resp.delete_cookie(SESSION_COOKIE, path="/")
    return resp


@router.get("/me")
def auth_me(
    db: Session = Depends(get_db),
    guid: str = Depends(get_current_user),
):
    user = get_user(db, guid)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return {"guid": user.guid, "nickname": user.nickname, "image_url": user.image_url}
