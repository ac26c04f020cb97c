# app/database/connection.py
"""Store handles for the two independent databases.

The identity store holds relational records (users, companies, retailers,
categories, promotions). The catalog store holds product documents, price
history and inventory logs. Each handle is constructed and opened by the
application at startup and disposed at shutdown; request handlers get
sessions through the ``get_identity_db`` / ``get_catalog_db`` dependencies.
"""
import logging
from typing import Iterator, Optional

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger(__name__)

IdentityBase = declarative_base()
CatalogBase = declarative_base()


class Store:
    def __init__(self, name: str, url: str, base) -> None:
        self.name = name
        self.url = url
        self.base = base
        self.engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def is_open(self) -> bool:
        return self.engine is not None

    def open(self) -> "Store":
        connect_args = {"check_same_thread": False} if self.url.startswith("sqlite") else {}
        self.engine = create_engine(self.url, connect_args=connect_args, pool_pre_ping=True)
        self.base.metadata.create_all(bind=self.engine)
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        logger.info("%s store opened", self.name)
        return self

    def close(self) -> None:
        if self.engine is None:
            return
        self.engine.dispose()
        self.engine = None
        self._session_factory = None
        logger.info("%s store closed", self.name)

    def session(self) -> Session:
        if self._session_factory is None:
            raise RuntimeError(f"{self.name} store is not open")
        return self._session_factory()

    def ping(self) -> bool:
        with self.session() as db:
            db.execute(text("SELECT 1"))
        return True


def _session_from(store: Store) -> Iterator[Session]:
    db = store.session()
    try:
        yield db
    finally:
        db.close()


def get_identity_db(request: Request) -> Iterator[Session]:
    yield from _session_from(request.app.state.identity_store)


def get_catalog_db(request: Request) -> Iterator[Session]:
    yield from _session_from(request.app.state.catalog_store)
