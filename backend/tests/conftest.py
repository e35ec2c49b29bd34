import os
import tempfile

# Settings are read at import time, so point them at a scratch area first
_TMP_DIR = tempfile.mkdtemp(prefix="marketplace-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENVIRONMENT"] = "development"
os.environ["SECRET_KEY"] = "test-secret"

import pytest
from fastapi.testclient import TestClient

from app.core.database import Base, engine, SessionLocal
from app.main import app
from app.models import product, user  # noqa: F401


@pytest.fixture(autouse=True)
def clean_database():
    """Every test starts from empty tables"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def register(client, name, email, role="client", password="secret123", whatsapp=None):
    body = {"name": name, "email": email, "password": password, "role": role}
    if whatsapp is not None:
        body["whatsappNumber"] = whatsapp
    response = client.post("/api/auth/register", json=body)
    assert response.status_code == 201, response.text
    return response.json()


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def vendor(client):
    return register(client, "Vera Vendor", "vera@example.com", role="vendor", whatsapp="+15551234567")


@pytest.fixture
def other_vendor(client):
    return register(client, "Otto Vendor", "otto@example.com", role="vendor", whatsapp="+15557654321")


@pytest.fixture
def customer(client):
    return register(client, "Cleo Client", "cleo@example.com")


@pytest.fixture
def admin(client):
    return register(client, "Ada Admin", "ada@example.com", role="admin")
