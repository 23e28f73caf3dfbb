# app/db/session.py
import logging
from typing import Iterator

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.db.engine import SessionLocal, engine

logger = logging.getLogger(__name__)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
        # read-only routes make this a no-op; routes that upsert the weekly cache rely on it
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
    finally:
        try:
            db.close()
        except OperationalError:
            # underlying socket already dead; dispose pool to force fresh conns next time
            logger.warning("DB connection dropped on close; disposing pool")
            engine.dispose()
