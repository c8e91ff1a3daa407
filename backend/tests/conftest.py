import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SEED_DEFAULT_ADMIN", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from app.database import Base, get_db
from app.main import app
from app.models.user import User
from app.services.auth_service import hash_password

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "password123"

engine = create_engine(TEST_DB_URL, connect_args={"check_same_thread": False}, poolclass=StaticPool)
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def seed_users(db):
    password_hash = hash_password(TEST_PASSWORD)
    users = {
        "admin": User(name="Admin", email="admin@taskboard.io", role="admin", password_hash=password_hash),
        "manager": User(name="Manager", email="manager@taskboard.io", role="manager", password_hash=password_hash),
        "member": User(name="Member", email="member@taskboard.io", role="member", password_hash=password_hash),
        "outsider": User(name="Outsider", email="outsider@taskboard.io", role="member", password_hash=password_hash),
    }
    for u in users.values():
        db.add(u)
    db.commit()
    for u in users.values():
        db.refresh(u)
    return users


def get_token(client, email: str, password: str = TEST_PASSWORD) -> str:
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()["access_token"]


def auth_headers(client, email: str) -> dict:
    return {"Authorization": f"Bearer {get_token(client, email)}"}


def create_project(client, headers: dict, name: str = "Board Project", **extra) -> dict:
    resp = client.post("/api/projects", json={"name": name, **extra}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


def add_member(client, headers: dict, project_id: int, user_id: int, role: str = "member") -> list:
    resp = client.post(
        f"/api/projects/{project_id}/members",
        json={"user_id": user_id, "role": role},
        headers=headers,
    )
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


def create_task(client, headers: dict, project_id: int, title: str = "Write docs", **extra) -> dict:
    resp = client.post("/api/tasks", json={"project_id": project_id, "title": title, **extra}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]
