import asyncio
import os
import tempfile

# Must be set before the app modules read the environment
_tmp_dir = tempfile.mkdtemp()
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_tmp_dir}/startup.db"
os.environ["ADMIN_USER_IDS"] = "admin-user"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel

from database import get_session
from main import app
from preferences import PreferenceStore

ADMIN = "admin-user"
SECRETARY = "secretary-1"
ALICE = "alice"
BOB = "bob"


def headers(user_id):
    return {"X-User-Id": user_id}


def run_with_store(engine, session_factory, scenario):
    """Run an async preference scenario against the test database."""
    async def runner():
        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        async with session_factory() as session:
            await scenario(PreferenceStore(session))

    asyncio.run(runner())


@pytest.fixture
def engine(tmp_path):
    return create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/test.db", poolclass=NullPool)


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def client(engine, session_factory):
    async def override_get_session():
        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def society(client):
    """An active society with a secretary and two approved residents."""
    response = client.post("/societies", headers=headers(SECRETARY), json={
        "name": "Green Meadows",
        "address": "12 Park Road",
        "city": "Pune",
        "state": "Maharashtra",
        "pincode": "411001",
    })
    assert response.status_code == 201
    society_id = response.json()["id"]

    response = client.post(
        f"/admin/societies/{society_id}/review", headers=headers(ADMIN), json={"approve": True}
    )
    assert response.status_code == 200

    for user_id in (ALICE, BOB):
        response = client.post(f"/societies/{society_id}/members", headers=headers(user_id), json={})
        assert response.status_code == 201
        member_id = response.json()["id"]
        response = client.post(
            f"/societies/{society_id}/members/{member_id}/approve", headers=headers(SECRETARY)
        )
        assert response.status_code == 200

    return society_id


@pytest.fixture
def clubhouse(client, society):
    response = client.post(
        f"/societies/{society}/facilities",
        headers=headers(SECRETARY),
        json={"name": "Clubhouse", "description": "Party hall with kitchen"},
    )
    assert response.status_code == 201
    return response.json()["id"]
