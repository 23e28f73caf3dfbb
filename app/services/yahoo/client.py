from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl

import requests
from fastapi import HTTPException
from requests.adapters import HTTPAdapter
from sqlalchemy.orm import Session
from urllib3.util.retry import Retry

from app.core.config import settings
from app.db.models import OAuthToken
from app.services.yahoo.oauth import YahooAuthError, decrypt_value, get_latest_token, refresh_token

logger = logging.getLogger(__name__)

# ----------------------------
# HTTP session (connection pool shared by the per-team fan-out)
# ----------------------------
_REQS = requests.Session()
_REQS.mount(
    "https://",
    HTTPAdapter(
        pool_connections=8,
        pool_maxsize=32,
        max_retries=Retry(
            total=2,
            backoff_factor=0.2,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
        ),
    ),
)


def _auth_headers(access_token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {access_token}", "Accept": "application/json"}


def _raise_with_yahoo_body(resp: requests.Response) -> None:
    # Include upstream body so the logs and the API error say *why* Yahoo refused
    msg = (resp.text or "<no-body>")[:2000]
    raise HTTPException(status_code=resp.status_code, detail=f"Yahoo error {resp.status_code} on {resp.url} :: {msg}")


class YahooSession:
    """
    Yahoo Fantasy GETs bound to one already-decrypted access token.

    Holds no DB session, so it is safe to share across worker threads.
    A 401 surfaces as HTTPException(401); the caller decides whether to refresh.
    """

    def __init__(self, access_token: str, *, base_url: str | None = None, timeout: float | None = None):
        self.access_token = access_token
        self.base_url = (base_url or settings.YAHOO_API_BASE).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.YAHOO_TIMEOUT_SECONDS

    def get(self, path: str, params: Optional[dict] = None) -> dict:
        rel = path.lstrip("/")
        q: Dict[str, Any] = {}
        if "?" in rel:
            rel, embedded_qs = rel.split("?", 1)
            q.update(dict(parse_qsl(embedded_qs, keep_blank_values=True)))
        q.update(params or {})
        q.setdefault("format", "json")

        url = f"{self.base_url}/{rel}"
        try:
            resp = _REQS.get(url, headers=_auth_headers(self.access_token), params=q, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Yahoo request failed: %s (%s)", url, e)
            raise HTTPException(status_code=502, detail=f"Yahoo request failed for {url}: {e}")

        if not resp.ok:
            _raise_with_yahoo_body(resp)
        try:
            return resp.json()
        except ValueError:
            _raise_with_yahoo_body(resp)


def _token_or_400(db: Session, user_id: str) -> OAuthToken:
    uid = (user_id or "").strip()
    tok = get_latest_token(db, uid)
    if not tok:
        raise HTTPException(
            status_code=400,
            detail=f"No Yahoo OAuth token on file for user_id={uid!r}. Call /auth/login and complete the flow first.",
        )
    return tok


def open_yahoo_session(db: Session, user_id: str) -> YahooSession:
    tok = _token_or_400(db, user_id)
    return YahooSession(decrypt_value(tok.access_token))


def refresh_yahoo_session(db: Session, user_id: str) -> YahooSession:
    tok = _token_or_400(db, user_id)
    try:
        new_tok = refresh_token(db, user_id, tok)
    except YahooAuthError as e:
        raise HTTPException(status_code=401, detail=f"Yahoo authorization expired; log in again. ({e})")
    return YahooSession(decrypt_value(new_tok.access_token))


def yahoo_get(db: Session, user_id: str, path: str, params: Optional[dict] = None) -> dict:
    """
    Single Yahoo GET with auto-refresh on 401, for request-thread callers.
    path like "/league/458.l.1234/teams"; may carry its own query string.
    """
    yahoo = open_yahoo_session(db, user_id)
    try:
        return yahoo.get(path, params)
    except HTTPException as he:
        if he.status_code != 401:
            raise
    logger.info("Yahoo returned 401 for %s; refreshing token", path)
    return refresh_yahoo_session(db, user_id).get(path, params)
