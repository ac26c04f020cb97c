import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database.connection import CatalogBase, IdentityBase, get_catalog_db, get_identity_db
from app.main import app

TEST_DB_URL = "sqlite:///:memory:"


def _memory_engine():
    return create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


identity_engine = _memory_engine()
catalog_engine = _memory_engine()

IdentitySessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=identity_engine)
CatalogSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=catalog_engine)


@pytest.fixture(scope="session", autouse=True)
def create_test_database():
    IdentityBase.metadata.create_all(bind=identity_engine)
    CatalogBase.metadata.create_all(bind=catalog_engine)
    yield
    CatalogBase.metadata.drop_all(bind=catalog_engine)
    IdentityBase.metadata.drop_all(bind=identity_engine)


def _rollback_session(engine, session_factory):
    connection = engine.connect()
    trans = connection.begin()
    session = session_factory(bind=connection)
    try:
        yield session
    finally:
        session.close()
        trans.rollback()
        connection.close()


@pytest.fixture()
def identity_db():
    yield from _rollback_session(identity_engine, IdentitySessionLocal)


@pytest.fixture()
def catalog_db():
    yield from _rollback_session(catalog_engine, CatalogSessionLocal)


@pytest.fixture()
def client(identity_db, catalog_db):
    app.dependency_overrides[get_identity_db] = lambda: identity_db
    app.dependency_overrides[get_catalog_db] = lambda: catalog_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
