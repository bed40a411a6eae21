"""
SQLAlchemy engine and session management.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Generator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """
    Owns the engine and session factory for one connection string.

    Built once by the application factory and shared by every request;
    sessions themselves are short-lived and request-scoped.
    """

    def __init__(self, url: str, echo: bool = False):
        connect_args = {}
        if url.startswith("sqlite"):
            # Required for SQLite when sessions are used from worker threads.
            connect_args["check_same_thread"] = False

        self.url = url
        self.engine = create_engine(
            url,
            pool_pre_ping=True,
            future=True,
            echo=echo,
            connect_args=connect_args,
        )
        self.session_factory = sessionmaker(
            bind=self.engine,
            autoflush=False,
            autocommit=False,
            expire_on_commit=False,
            future=True,
        )

    def create_all(self) -> None:
        """Import models and create the users and tasks tables if missing."""
        from todo_api import models  # noqa: F401  (side-effect import)

        Base.metadata.create_all(bind=self.engine)
        logger.info("Database ready at %s", self.engine.url.render_as_string(hide_password=True))

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """
        Yield a session and guarantee cleanup. Work that is not committed
        explicitly is rolled back when an exception escapes.
        """
        session = self.session_factory()
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request) -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request from the app's Database."""
    database: Database = request.app.state.database
    with database.session() as session:
        yield session
