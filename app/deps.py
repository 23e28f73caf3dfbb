from typing import Optional

from fastapi import Cookie, HTTPException, status

from app.core.auth import decode_session_token

# Yahoo keys look like 458.l.12345 / 458.l.12345.t.3
LEAGUE_KEY_PATTERN = r"^\d+\.l\.\d+$"
TEAM_KEY_PATTERN = r"^\d+\.l\.\d+\.t\.\d+$"


def get_current_user(session_token: Optional[str] = Cookie(default=None)) -> str:
    """
    Retrieves and validates the session cookie. Returns the user's GUID or raises 401 if invalid/absent.
    """
    if not session_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    guid = decode_session_token(session_token)
    if not guid:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired session")
    return guid
