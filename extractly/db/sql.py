from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from extractly.logger import get_logger

logger = get_logger(__name__)

Base = declarative_base()


class Database:
    """Engine + session factory, created once at startup and passed around."""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        kwargs = {"echo": echo, "pool_pre_ping": True}
        if url.startswith("sqlite"):
            # sync routes run in a threadpool
            kwargs["connect_args"] = {"check_same_thread": False}
            if url in ("sqlite://", "sqlite:///:memory:"):
                kwargs["poolclass"] = StaticPool
        self.engine = create_engine(url, **kwargs)
        self._session_factory = sessionmaker(
            autocommit=False, autoflush=False, bind=self.engine, expire_on_commit=False
        )

    @contextmanager
    def session(self) -> Iterator[Session]:
        """
        Usage:
            with database.session() as db:
                ... use db (Session) ...
        """
        db = self._session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def create_all(self) -> None:
        # registers the mapped tables on Base.metadata
        from extractly.records import schema  # noqa: F401

        Base.metadata.create_all(self.engine)

    def ping(self) -> None:
        with self.engine.connect() as connection:
            connection.execute(text("SELECT 1"))

    def dispose(self) -> None:
        logger.info("Disconnecting from database...")
        self.engine.dispose()
