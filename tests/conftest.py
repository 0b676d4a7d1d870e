import os
import sys
from pathlib import Path

import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Set testing environment before the app reads its settings
os.environ["TESTING"] = "1"
os.environ["TEST_DATABASE_URL"] = "sqlite:///./test.db"
os.environ["SEED_DEMO_DATA"] = "0"

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from clinic.main import app
from clinic.core.database import get_db, Base
from clinic import models  # noqa: F401
from clinic.services.demo_data import seed_demo_data

# Create test database
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db

DEMO_CREDENTIALS = {
    "admin": ("admin@demo.test", "admin123"),
    "doctor": ("doctor@demo.test", "doctor123"),
    "patient": ("patient@demo.test", "patient123"),
}

@pytest.fixture(scope="function")
def test_db():
    # Create tables and load the demo clinic
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        seed_demo_data(db)
    finally:
        db.close()
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def db_session(test_db):
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture
def client():
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client

def sign_in(client, email, password):
    response = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()

def auth_headers(client, role):
    email, password = DEMO_CREDENTIALS[role]
    token = sign_in(client, email, password)["access_token"]
    return {"Authorization": f"Bearer {token}"}

@pytest.fixture
def admin_headers(client, test_db):
    return auth_headers(client, "admin")

@pytest.fixture
def doctor_headers(client, test_db):
    return auth_headers(client, "doctor")

@pytest.fixture
def patient_headers(client, test_db):
    return auth_headers(client, "patient")
