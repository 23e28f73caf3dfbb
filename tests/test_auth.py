import time

from app.core.auth import SESSION_COOKIE, SESSION_EXP_SECONDS, create_session_token, decode_session_token
from app.db.models import User
from app.main import app
from fastapi.testclient import TestClient


def test_session_token_round_trip():
    token = create_session_token("GUID-1")
    assert decode_session_token(token) == "GUID-1"


def test_tampered_session_token_rejected():
    token = create_session_token("GUID-1")
    payload, sig = token.split(".")
    other_payload = create_session_token("GUID-2").split(".")[0]
    assert decode_session_token(f"{other_payload}.{sig}") is None
    assert decode_session_token(payload) is None
    assert decode_session_token("") is None
    assert decode_session_token("not-base64!.???") is None


def test_expired_session_token_rejected():
    issued = int(time.time()) - SESSION_EXP_SECONDS - 10
    assert decode_session_token(create_session_token("GUID-1", now=issued)) is None


def test_login_debug_returns_authorize_url(client):
    resp = client.get("/auth/login", params={"debug": "true", "return_to": "/leagues"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["authorize_url"].startswith("https://api.login.yahoo.com/oauth2/request_auth")
    assert "state=" in body["authorize_url"]
    assert body["return_to"].endswith("/leagues")


def test_callback_rejects_state_mismatch(client):
    resp = client.get("/auth/callback", params={"code": "abc", "state": "forged"}, follow_redirects=False)
    assert resp.status_code == 400


def test_me_requires_session(db_session):
    from app.db.session import get_db

    def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    try:
        anon = TestClient(app)
        assert anon.get("/auth/me").status_code == 401

        db_session.add(User(guid="GUID-1", nickname="joe"))
        db_session.commit()
        signed_in = TestClient(app, cookies={SESSION_COOKIE: create_session_token("GUID-1")})
        resp = signed_in.get("/auth/me")
        assert resp.status_code == 200
        assert resp.json()["nickname"] == "joe"
    finally:
        app.dependency_overrides.clear()


def test_logout_clears_cookie(client):
    resp = client.post("/auth/logout")
    assert resp.status_code == 200
    assert SESSION_COOKIE in resp.headers.get("set-cookie", "")
