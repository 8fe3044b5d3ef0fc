import os
from collections.abc import Generator

# Settings are read at import time; keep tests off any real database or provider.
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from copydesk import models  # noqa: F401
from copydesk.api.deps import get_db
from copydesk.main import app
from copydesk.tests.utils import signup_and_login


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine) -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine) -> Generator[TestClient, None, None]:
    def get_test_db() -> Generator[Session, None, None]:
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db] = get_test_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def user_headers(client: TestClient) -> dict[str, str]:
    return signup_and_login(client, "owner@copydesk.io")


@pytest.fixture
def other_headers(client: TestClient) -> dict[str, str]:
    return signup_and_login(client, "intruder@copydesk.io")
