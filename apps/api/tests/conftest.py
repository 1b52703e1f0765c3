import uuid
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from velohub.core.security import create_access_token
from velohub.db.session import get_db
from velohub.main import app
from velohub.models.base import Base
from velohub.models.store import StoreORM
from velohub.models.user import User


def _utcnow():
    return datetime.now(timezone.utc)


@pytest.fixture()
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(session_factory):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _create_store(db, name: str) -> StoreORM:
    store = StoreORM(id=uuid.uuid4(), name=name, created_at=_utcnow(), updated_at=_utcnow())
    db.add(store)
    db.commit()
    return store


def _create_user(db, store: StoreORM, role: str) -> User:
    user = User(
        id=uuid.uuid4(),
        email=f"{role}-{uuid.uuid4().hex[:8]}@velohub.test",
        name=role.title(),
        is_active=True,
        store_id=store.id,
        role=role,
    )
    db.add(user)
    db.commit()
    return user


def _headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}


@pytest.fixture()
def store(db_session):
    return _create_store(db_session, "Garagem Central")


@pytest.fixture()
def owner(db_session, store):
    return _create_user(db_session, store, "owner")


@pytest.fixture()
def employee(db_session, store):
    return _create_user(db_session, store, "employee")


@pytest.fixture()
def owner_headers(owner):
    return _headers(owner)


@pytest.fixture()
def employee_headers(employee):
    return _headers(employee)


@pytest.fixture()
def other_store_headers(db_session):
    other = _create_store(db_session, "Outra Loja")
    return _headers(_create_user(db_session, other, "owner"))
