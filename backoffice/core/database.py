"""
Database Configuration
"""
from contextlib import contextmanager
from typing import Generator, Iterator
import logging

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool

from backoffice.core.exceptions import BackOfficeError, PersistenceError

logger = logging.getLogger(__name__)

# Base model
Base = declarative_base()


class Database:
    """
    Storage handle owning the engine and the session factory.

    Constructed once by the application factory, opened at startup and
    disposed at shutdown.
    """

    def __init__(self, url: str, echo: bool = False):
        engine_kwargs = {"echo": echo}
        if url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if url in ("sqlite://", "sqlite:///:memory:"):
                # In-memory databases live in one connection
                engine_kwargs["poolclass"] = StaticPool
        self.url = url
        self.engine = create_engine(url, **engine_kwargs)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def open(self):
        """Create all tables"""
        # Import models to register them with Base
        from backoffice import models  # noqa: F401
        Base.metadata.create_all(bind=self.engine)
        logger.info(f"Database ready at {self.engine.url.render_as_string(hide_password=True)}")

    def close(self):
        self.engine.dispose()

    def session(self) -> Session:
        return self.SessionLocal()


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """
    Run the enclosed block as a single transaction on ``db``.

    Commits when the block finishes, rolls everything back when it raises.
    Storage failures surface as PersistenceError without the driver message.
    """
    try:
        yield db
        db.commit()
    except BackOfficeError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Transaction rolled back: {exc}", exc_info=True)
        raise PersistenceError("The transaction could not be completed") from exc
    except Exception:
        db.rollback()
        raise


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency that provides a database session.
    Ensures the session is closed after use.
    """
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
