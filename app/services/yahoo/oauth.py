from __future__ import annotations

import logging
from typing import Optional

import requests
from cryptography.fernet import Fernet
from requests_oauthlib import OAuth2Session
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.models import OAuthToken

logger = logging.getLogger(__name__)

# Read-only fantasy scope is all the ranking needs
AUTH_SCOPE = ["fspt-r"]

# Tokens are stored Fernet-encrypted; decrypted only right before use
_fernet = Fernet(settings.ENCRYPTION_KEY.encode())


def encrypt_value(value: str | None) -> str | None:
    if value is None:
        return None
    return _fernet.encrypt(value.encode()).decode()


def decrypt_value(value: str | None) -> str | None:
    if value is None:
        return None
    return _fernet.decrypt(value.encode()).decode()


class YahooAuthError(RuntimeError):
    """Stored Yahoo credentials are missing, expired beyond refresh, or rejected."""


# ---- OAuth helpers ----
def build_oauth(redirect_uri: str | None = None, token: dict | None = None) -> OAuth2Session:
    return OAuth2Session(
        client_id=settings.YAHOO_CLIENT_ID,
        redirect_uri=(redirect_uri or settings.YAHOO_REDIRECT_URI or "").strip() or None,
        scope=AUTH_SCOPE,
        token=token,
    )


def get_authorization_url(state: str, redirect_uri: str | None = None) -> str:
    oauth = build_oauth(redirect_uri)
    url, _ = oauth.authorization_url(settings.YAHOO_AUTH_URL, state=state)
    return url


def exchange_token(code: str, redirect_uri: str | None = None) -> dict:
    """
    Exchange the Yahoo auth code for an access/refresh token.
    No DB writes here; persist once the user's GUID is known.
    """
    oauth = build_oauth(redirect_uri)
    return oauth.fetch_token(
        token_url=settings.YAHOO_TOKEN_URL,
        code=code,
        include_client_id=True,
        client_secret=settings.YAHOO_CLIENT_SECRET,
        auth=(settings.YAHOO_CLIENT_ID, settings.YAHOO_CLIENT_SECRET),
    )


def persist_token(db: Session, user_id: str, token: dict) -> OAuthToken:
    rec = OAuthToken(
        user_id=user_id,
        access_token=encrypt_value(token.get("access_token", "")),
        refresh_token=encrypt_value(token.get("refresh_token")) if token.get("refresh_token") else None,
        expires_in=token.get("expires_in"),
        token_type=token.get("token_type"),
        scope=token.get("scope") if isinstance(token.get("scope"), str) else " ".join(token.get("scope") or []),
    )
    db.add(rec)
    db.commit()
    db.refresh(rec)
    return rec


def get_latest_token(db: Session, user_id: str) -> Optional[OAuthToken]:
    return (
        db.query(OAuthToken)
        .filter(OAuthToken.user_id == user_id)
        .order_by(OAuthToken.id.desc())
        .first()
    )


def refresh_token(db: Session, user_id: str, tok: OAuthToken) -> OAuthToken:
    if not tok.refresh_token:
        raise YahooAuthError("Yahoo token expired and no refresh_token is available.")

    data = {
        "grant_type": "refresh_token",
        "refresh_token": decrypt_value(tok.refresh_token),
        "redirect_uri": settings.YAHOO_REDIRECT_URI,
    }
    r = requests.post(
        settings.YAHOO_TOKEN_URL,
        data=data,
        auth=(settings.YAHOO_CLIENT_ID, settings.YAHOO_CLIENT_SECRET),
        timeout=settings.YAHOO_TIMEOUT_SECONDS,
    )
    if r.status_code != 200:
        logger.warning("Yahoo token refresh failed for %s: %s", user_id, r.status_code)
        raise YahooAuthError(f"Yahoo refresh failed: {r.status_code} {r.text[:300]}")

    new_token = r.json()
    # Yahoo omits refresh_token on some refreshes; keep the previous one
    new_token.setdefault("refresh_token", data["refresh_token"])
    logger.info("Refreshed Yahoo token for %s", user_id)
    return persist_token(db, user_id, new_token)
