import os

# Set testing environment before the application reads its settings
os.environ["TESTING"] = "1"
os.environ["TEST_DATABASE_URL"] = "sqlite:///./test.db"
os.environ["SEED_ON_STARTUP"] = "0"

import pytest
from fastapi.testclient import TestClient

from appointment_system.main import app
from appointment_system.core.database import Base, SessionLocal, engine, get_redis, init_db
from appointment_system.models import Menu, Role, Staff, User
from appointment_system.schemas.user import UserCreate
from appointment_system.services.seed_service import seed
from appointment_system.services.user_service import UserService


class FakeRedis:
    """The few redis commands the application uses, kept in a dict."""

    def __init__(self):
        self.store = {}

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = str(value)

    def incr(self, key):
        value = int(self.store.get(key, 0)) + 1
        self.store[key] = str(value)
        return value

    def delete(self, key):
        self.store.pop(key, None)


@pytest.fixture(scope="function")
def test_db():
    # Create tables
    init_db(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(test_db):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded(db):
    seed(db)
    return db


@pytest.fixture
def fake_redis():
    fake = FakeRedis()
    app.dependency_overrides[get_redis] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_redis, None)


@pytest.fixture
def client(test_db, fake_redis):
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client


def login(client, username, password):
    """Log in through the API and return bearer headers; drops the cookie it also sets."""
    response = client.post("/api/v1/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['token']}"}



def browser_login(client, username, password):
    """Log in through the login form, keeping the session cookie on the client."""
    response = client.post(
        "/account/login",
        data={"username": username, "password": password},
        follow_redirects=False,
    )
    assert response.status_code == 303, response.text
    return response

@pytest.fixture
def admin_headers(client, seeded):
    return login(client, "admin", "admin123")


@pytest.fixture
def staff_headers(client, seeded):
    return login(client, "staff", "staff123")


def ids_by_name(db, model):
    return {row.name: row.id for row in db.query(model).all()}


def make_user(db, username, password="secret1", roles=(), menus=(), approved=True, active=True):
    """Create a user through the service, linking roles and menus by name."""
    role_ids = ids_by_name(db, Role)
    menu_ids = ids_by_name(db, Menu)
    data = UserCreate(
        full_name=username.title(),
        username=username,
        password=password,
        is_active=active,
        role_ids=[role_ids[name] for name in roles],
        menu_ids=[menu_ids[name] for name in menus],
    )
    return UserService(db).create_user(data, approved=approved)


def make_staff(db, full_name="Dana Smith", **fields):
    staff = Staff(full_name=full_name, **fields)
    db.add(staff)
    db.commit()
    db.refresh(staff)
    return staff


def reload_user(db, user_id):
    db.expire_all()
    return db.query(User).filter(User.id == user_id).first()
