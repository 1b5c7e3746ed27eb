"""
Database schema and connection management.

Uses SQLAlchemy against any supported URL: PostgreSQL in production,
SQLite for local runs and tests.
"""

from pathlib import Path
from typing import Union

from sqlalchemy import Column, Integer, String, create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


class PersonRow(Base):
    """Persisted person. Unknown attributes are stored as 0 / ''."""

    __tablename__ = "persons"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    surname = Column(String, nullable=False)
    patronymic = Column(String, nullable=False, default="", server_default="")
    age = Column(Integer, nullable=False, default=0, server_default="0")
    gender = Column(String, nullable=False, default="", server_default="")
    nationality = Column(String, nullable=False, default="", server_default="")


def get_engine(database_url: str) -> Engine:
    """
    Create an engine for the given URL.

    File-based SQLite URLs get their parent directory created.

    Args:
        database_url: SQLAlchemy database URL

    Returns:
        SQLAlchemy engine
    """
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        # Requests are served from a thread pool
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url, pool_pre_ping=True)


def init_database(engine_or_url: Union[Engine, str]) -> Engine:
    """
    Initialize database and create tables.

    Args:
        engine_or_url: Engine or SQLAlchemy database URL

    Returns:
        The engine the tables were created on
    """
    engine = get_engine(engine_or_url) if isinstance(engine_or_url, str) else engine_or_url
    Base.metadata.create_all(engine)
    return engine


def get_session_factory(engine_or_url: Union[Engine, str]) -> sessionmaker:
    """
    Get a session factory. Each session it creates is one transaction scope.

    Args:
        engine_or_url: Engine or SQLAlchemy database URL

    Returns:
        SQLAlchemy sessionmaker
    """
    engine = get_engine(engine_or_url) if isinstance(engine_or_url, str) else engine_or_url
    return sessionmaker(bind=engine, expire_on_commit=False)
