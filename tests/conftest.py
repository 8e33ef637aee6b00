import os

# Must be set before the app modules read their configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECURITY_HEADERS_ENABLED"] = "true"

import pytest
from fastapi import Header, HTTPException
from fastapi.testclient import TestClient

from eventstaff.auth import build_session_context, get_session_context
from eventstaff.constants import Role
from eventstaff.database import Base, SessionLocal, engine, get_db
from eventstaff.main import app
from eventstaff.models import Staff, User


@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db):
    """
    TestClient whose caller is chosen per request with the X-Test-User header
    (a user id created through the make_user fixture).
    """

    def override_get_db():
        yield db

    async def override_session_context(x_test_user: str = Header(None)):
        if not x_test_user:
            raise HTTPException(status_code=401, detail="Not authenticated")
        user = db.query(User).filter(User.id == x_test_user).first()
        if not user:
            raise HTTPException(status_code=401, detail="Unknown test user")
        return build_session_context(db, user)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_context] = override_session_context
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db):
    def _make_user(user_id: str, role: Role = Role.CONSUMER, **fields) -> User:
        user = User(id=user_id, name=fields.pop("name", user_id.title()), role=role.value, **fields)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def make_staff(db):
    def _make_staff(name: str, role: Role = Role.WAITER_STEWARD, **fields) -> Staff:
        staff = Staff(
            name=name,
            phone=fields.pop("phone", "+919876543210"),
            role=role.value,
            **fields,
        )
        db.add(staff)
        db.commit()
        db.refresh(staff)
        return staff

    return _make_staff


def as_user(user_id: str) -> dict:
    return {"X-Test-User": user_id}


@pytest.fixture()
def headers():
    return as_user
