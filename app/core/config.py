# app/core/config.py
from __future__ import annotations

import json
from typing import Dict, List, Literal, Optional

from cryptography.fernet import Fernet
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


EnvType = Literal["local", "dev", "staging", "prod"]
PolarityName = Literal["higher", "lower", "neutral"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # App
    APP_NAME: str = "FantasyPowerIndex"
    APP_ENV: EnvType = "local"
    SECRET_KEY: str = Field(default="change_me_dev_only", description="Used for session signing")
    ENCRYPTION_KEY: str  # required; Fernet key
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: str | List[str] = Field(
        default='["http://localhost:3000","http://127.0.0.1:3000"]',
        description='JSON list or comma-separated origins',
    )

    # DB
    DATABASE_URL: Optional[str] = None

    FRONTEND_URL_LOCAL: str = "http://localhost:3000"
    FRONTEND_URL_REMOTE: str = "https://fantasy.example.com"

    @property
    def frontend_url(self) -> str:
        return self.FRONTEND_URL_REMOTE if self.APP_ENV != "local" else self.FRONTEND_URL_LOCAL

    # Yahoo OAuth
    YAHOO_CLIENT_ID: Optional[str] = None
    YAHOO_CLIENT_SECRET: Optional[str] = None
    YAHOO_REDIRECT_URI: Optional[str] = None
    YAHOO_AUTH_URL: str = "https://api.login.yahoo.com/oauth2/request_auth"
    YAHOO_TOKEN_URL: str = "https://api.login.yahoo.com/oauth2/get_token"
    YAHOO_API_BASE: str = "https://fantasysports.yahooapis.com/fantasy/v2"
    YAHOO_GAME_CODE: str = "mlb"
    YAHOO_TIMEOUT_SECONDS: float = 30.0

    # Power index
    STAT_FETCH_MAX_WORKERS: int = Field(default=8, ge=1, le=32)
    UNKNOWN_STAT_POLICY: Literal["higher", "exclude"] = "higher"
    STAT_POLARITY_OVERRIDES: str | Dict[str, PolarityName] = Field(
        default="{}",
        description='JSON object of stat_id -> "higher" | "lower" | "neutral"',
    )
    POWER_INDEX_TIEBREAK: Literal["input", "name"] = "input"

    # Derived / convenience flags
    @property
    def IS_LOCAL(self) -> bool:
        return self.APP_ENV == "local"

    @property
    def COOKIE_SECURE(self) -> bool:
        # Secure cookies in any non-local environment
        return not self.IS_LOCAL

    # ---------- Validators ----------

    @field_validator("ENCRYPTION_KEY")
    @classmethod
    def _validate_fernet_key(cls, v: str) -> str:
        key = v.strip().strip("\"'")
        try:
            Fernet(key.encode())
        except (ValueError, TypeError):
            raise ValueError(
                "ENCRYPTION_KEY must be a Fernet key: 32 url-safe base64-encoded bytes "
                "(python -c 'from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())')"
            )
        return key

    @field_validator("CORS_ORIGINS")
    @classmethod
    def _parse_cors(cls, v):
        # Accept JSON list or comma-separated string
        if isinstance(v, list):
            return v
        s = str(v).strip()
        if not s:
            return []
        try:
            parsed = json.loads(s)
            if isinstance(parsed, list):
                return parsed
        except ValueError:
            pass
        return [p.strip() for p in s.split(",") if p.strip()]

    @field_validator("STAT_POLARITY_OVERRIDES")
    @classmethod
    def _parse_overrides(cls, v):
        if isinstance(v, dict):
            parsed = v
        else:
            s = str(v).strip() or "{}"
            try:
                parsed = json.loads(s)
            except ValueError:
                raise ValueError("STAT_POLARITY_OVERRIDES must be a JSON object")
            if not isinstance(parsed, dict):
                raise ValueError("STAT_POLARITY_OVERRIDES must be a JSON object")
        out: Dict[str, str] = {}
        for stat_id, polarity in parsed.items():
            p = str(polarity).strip().lower()
            if p not in ("higher", "lower", "neutral"):
                raise ValueError(f"Unknown polarity {polarity!r} for stat {stat_id!r}")
            out[str(stat_id)] = p
        return out

    # ---------- Runtime validations ----------

    def validate_at_startup(self) -> None:
        """Fail fast on settings a deployed (non-local) instance cannot run without."""
        if self.IS_LOCAL:
            return
        required = ("DATABASE_URL", "YAHOO_CLIENT_ID", "YAHOO_CLIENT_SECRET", "YAHOO_REDIRECT_URI", "CORS_ORIGINS")
        missing = [name for name in required if not getattr(self, name)]
        if missing:
            raise RuntimeError(f"Config validation failed for APP_ENV={self.APP_ENV}: missing {', '.join(missing)}")


settings = Settings()
