# app/db/engine.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings

DATABASE_URL = settings.DATABASE_URL or "sqlite:///./app.db"

engine_kwargs = {"pool_pre_ping": True, "echo": False, "future": True}

if DATABASE_URL.startswith("postgresql"):
    # SSL + TCP keepalives for hosted Postgres; pool sized for a small instance
    engine_kwargs.update(
        pool_recycle=300,
        pool_size=10,
        max_overflow=10,
        pool_timeout=10,
        connect_args={
            "sslmode": "require",
            "keepalives": 1,
            "keepalives_idle": 30,
            "keepalives_interval": 10,
            "keepalives_count": 5,
        },
    )
elif DATABASE_URL.startswith("sqlite"):
    engine_kwargs["connect_args"] = {"check_same_thread": False}

engine = create_engine(DATABASE_URL, **engine_kwargs)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,
    future=True,
)


def init_db() -> None:
    from app.db.models import Base

    Base.metadata.create_all(bind=engine)
