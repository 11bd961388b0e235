# app/core/database.py

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from app.core.config import settings


def build_engine(url: str):
    # SQLite needs check_same_thread=False: store calls run in a threadpool
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=False,
            future=True,
        )
    return create_engine(
        url,
        echo=False,
        future=True,
    )


SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL

engine = build_engine(SQLALCHEMY_DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)

Base = declarative_base()


def get_session_factory() -> sessionmaker:
    """FastAPI dependency; overridden in tests to point at a temporary database."""
    return SessionLocal
