from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from shopsense.config import settings


def make_engine(url: str, echo: bool = False, **kwargs):
    connect_args = kwargs.pop("connect_args", {})
    if url.startswith("sqlite"):
        connect_args.setdefault("check_same_thread", False)  # Required for SQLite
        connect_args.setdefault("timeout", settings.sqlite_busy_timeout)
    return create_engine(url, echo=echo, connect_args=connect_args, **kwargs)


engine = make_engine(settings.database_url, echo=settings.database_echo)

# Session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)

# Base class for all ORM models
Base = declarative_base()


# Dependency for FastAPI routes
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
