# app/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import routes_auth, routes_league, routes_reports, routes_teams
from app.core.config import settings
from app.core.logger import configure_logging
from app.db.engine import init_db
from app.middleware.cache_log import CacheHeaderLogMiddleware

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings.validate_at_startup()
    init_db()
    logger.info("%s started (env=%s)", settings.APP_NAME, settings.APP_ENV)
    yield


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
app.add_middleware(CacheHeaderLogMiddleware)

logger.info("CORS allow_origins = %s", settings.CORS_ORIGINS)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1):\d+$" if settings.IS_LOCAL else None,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=600,
)

# Routers
app.include_router(routes_auth.router)
app.include_router(routes_league.router)
app.include_router(routes_teams.router)
app.include_router(routes_reports.router)


@app.get("/health")
def health():
    return {"ok": True, "env": settings.APP_ENV}
