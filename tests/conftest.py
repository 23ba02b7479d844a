"""
Shared pytest fixtures: in-memory database, API client and user/store helpers.
"""
import os
import sys
from typing import Generator

# Settings are read at import time
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

# Add backend directory to sys.path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../backend"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from store_ratings.core import security
from store_ratings.core.rate_limit import limiter
from store_ratings.database import Database, get_db
from store_ratings.main import app
from store_ratings.models.rating import Rating
from store_ratings.models.store import Store
from store_ratings.models.user import User, Role

DEFAULT_PASSWORD = "Secret@123"


@pytest.fixture
def database() -> Generator[Database, None, None]:
    """In-memory SQLite database, one per test."""
    db = Database("sqlite://")
    db.create_all()
    try:
        yield db
    finally:
        db.drop_all()
        db.dispose()


@pytest.fixture
def test_db(database) -> Generator[Session, None, None]:
    session = database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(database) -> Generator[TestClient, None, None]:
    """API client whose requests use the in-memory database."""
    def _get_db():
        session = database.session()
        try:
            yield session
        finally:
            session.close()

    limiter.enabled = False
    app.dependency_overrides[get_db] = _get_db
    yield TestClient(app)
    del app.dependency_overrides[get_db]


@pytest.fixture
def make_user(test_db):
    """Factory inserting a user directly; names are padded to the 20 char minimum."""
    counter = {"n": 0}

    def _make_user(role: Role = Role.NORMAL_USER, name: str = None, email: str = None,
                   password: str = DEFAULT_PASSWORD) -> User:
        counter["n"] += 1
        user = User(
            name=name or f"Test {role.value} number {counter['n']:03d}",
            email=email or f"{role.value}{counter['n']}@example.com",
            hashed_password=security.get_password_hash(password),
            address=f"{counter['n']} Test Street, Example City",
            role=role,
        )
        test_db.add(user)
        test_db.commit()
        test_db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_store(test_db):
    counter = {"n": 0}

    def _make_store(name: str = None, owner: User = None, address: str = None) -> Store:
        counter["n"] += 1
        store = Store(
            name=name or f"Store {counter['n']:03d}",
            email=f"store{counter['n']}@example.com",
            address=address or f"{counter['n']} Market Street, Example City",
            owner_id=owner.id if owner else None,
        )
        test_db.add(store)
        test_db.commit()
        test_db.refresh(store)
        return store

    return _make_store


@pytest.fixture
def make_rating(test_db):
    def _make_rating(user: User, store: Store, value: int, comment: str = None) -> Rating:
        rating = Rating(user_id=user.id, store_id=store.id, rating=value, comment=comment)
        test_db.add(rating)
        test_db.commit()
        test_db.refresh(rating)
        return rating

    return _make_rating


def auth_headers(user: User) -> dict:
    token = security.create_access_token(
        {"sub": str(user.id), "email": user.email, "role": user.role.value}
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def normal_user(make_user) -> User:
    return make_user(Role.NORMAL_USER)


@pytest.fixture
def store_owner(make_user) -> User:
    return make_user(Role.STORE_OWNER)


@pytest.fixture
def admin_user(make_user) -> User:
    return make_user(Role.SYSTEM_ADMIN)


@pytest.fixture
def user_headers(normal_user) -> dict:
    return auth_headers(normal_user)


@pytest.fixture
def owner_headers(store_owner) -> dict:
    return auth_headers(store_owner)


@pytest.fixture
def admin_headers(admin_user) -> dict:
    return auth_headers(admin_user)


@pytest.fixture
def headers_for():
    """Bearer headers for any user."""
    return auth_headers
