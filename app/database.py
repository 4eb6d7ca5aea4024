import logging
from typing import Optional

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

# This file holds the ORM base and the store handle that owns the engine.

Base = declarative_base()

logger = logging.getLogger(__name__)


class Store:
    """Database handle: opened at startup, closed at shutdown, passed to handlers."""

    def __init__(self, url: str):
        self.url = url
        self.engine: Optional[Engine] = None
        self._sessionmaker: Optional[sessionmaker] = None

    def open(self):
        if self.engine is not None:
            return
        connect_args = {}
        if self.url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine = create_engine(self.url, connect_args=connect_args)
        if self.url.startswith("sqlite"):
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        # models must be imported so their tables are registered on Base
        from app import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        self._sessionmaker = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)
        logger.info("Store opened at %s", self.engine.url.render_as_string(hide_password=True))

    def close(self):
        if self.engine is None:
            return
        self.engine.dispose()
        self.engine = None
        self._sessionmaker = None
        logger.info("Store closed")

    def session(self) -> Session:
        if self._sessionmaker is None:
            raise RuntimeError("store is not open")
        return self._sessionmaker()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_db(request: Request):
    db = request.app.state.store.session()
    try:
        yield db
    finally:
        db.close()
