"""Pytest fixtures for API tests."""

import os
from collections.abc import AsyncGenerator, Generator

os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from benglish.api.deps import get_avatar_storage, get_db
from benglish.db import models  # noqa: F401  # Imported for side effects
from benglish.db.base import Base
from benglish.db.models import User, WordCategory
from benglish.db.session import Database
from benglish.main import create_app
from benglish.services.avatar import AvatarStorage
from benglish.utils.cache import cache_backend

PASSWORD = "supersecure"


@pytest.fixture()
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite emits its own BEGIN; let SQLAlchemy do it so SAVEPOINTs nest
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        dbapi_connection.execute("PRAGMA foreign_keys=ON")

    @event.listens_for(engine, "begin")
    def _emit_begin(connection):
        connection.exec_driver_sql("BEGIN")

    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(db_engine) -> Generator[Session, None, None]:
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def clear_cache() -> Generator[None, None, None]:
    cache_backend.clear(include_redis=True)
    try:
        yield
    finally:
        cache_backend.clear(include_redis=True)


@pytest.fixture()
def avatar_storage(tmp_path) -> AvatarStorage:
    return AvatarStorage(root=tmp_path, base_url="/media")


@pytest.fixture()
def app(db_engine, db_session: Session, avatar_storage: AvatarStorage):
    application = create_app(database=Database(db_engine))

    def override_get_db() -> Generator[Session, None, None]:
        yield db_session

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_avatar_storage] = lambda: avatar_storage
    return application


@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest_asyncio.fixture()
async def async_client(app) -> AsyncGenerator["httpx.AsyncClient", None]:
    import httpx

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


def register_and_login(
    client: TestClient, username: str = "learner", email: str = "learner@example.com"
) -> dict[str, str]:
    """Register an account and return an Authorization header for it."""

    response = client.post(
        "/api/v1/auth/register",
        json={
            "username": username,
            "email": email,
            "password": PASSWORD,
            "confirmPassword": PASSWORD,
        },
    )
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['accessToken']}"}


@pytest.fixture()
def auth_headers(client: TestClient) -> dict[str, str]:
    return register_and_login(client)


@pytest.fixture()
def current_user(auth_headers, db_session: Session) -> User:
    return db_session.query(User).filter(User.email == "learner@example.com").one()


@pytest.fixture()
def animals(db_session: Session) -> WordCategory:
    category = WordCategory(
        category="Animals",
        total=3,
        image="https://cdn.example.com/animals.png",
        items=[
            {"id": "a1", "english": "dog", "romanian": "câine"},
            {"id": "a2", "english": "cat", "romanian": "pisică"},
            {"id": "a3", "english": "horse", "romanian": "cal"},
        ],
    )
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture()
def colors(db_session: Session) -> WordCategory:
    category = WordCategory(
        category="Colors",
        total=2,
        items=[
            {"id": "c1", "english": "red", "romanian": "roșu"},
            {"id": "c2", "english": "blue", "romanian": "albastru"},
        ],
    )
    db_session.add(category)
    db_session.commit()
    return category
