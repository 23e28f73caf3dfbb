from __future__ import annotations

from sqlalchemy.orm import Session

from app.db.models import User
from app.services.yahoo.client import YahooSession
from app.services.yahoo.parsers import parse_user_profile


def upsert_user_from_yahoo(db: Session, access_token: str) -> dict:
    """
    Fetch the current Yahoo user with a fresh access_token (OAuth callback,
    before any token is stored) and upsert it.
    Returns: {"guid": str, "nickname": str|None, "image_url": str|None}
    """
    profile = parse_user_profile(YahooSession(access_token).get("/users;use_login=1"))
    guid = profile.get("guid")
    if not guid:
        raise RuntimeError("Could not parse Yahoo user GUID from /users;use_login=1")

    existing = db.get(User, guid)
    if existing:
        if profile.get("nickname"):
            existing.nickname = profile["nickname"]
        if profile.get("image_url"):
            existing.image_url = profile["image_url"]
    else:
        db.add(User(guid=guid, nickname=profile.get("nickname"), image_url=profile.get("image_url")))
    db.commit()
    return profile


def get_user(db: Session, guid: str) -> User | None:
    return db.get(User, guid)
