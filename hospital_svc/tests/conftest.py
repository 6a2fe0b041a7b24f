"""
Shared pytest fixtures for API tests.

Key patterns:

1. Database Isolation: Each test gets a fresh temporary database
2. DI Override: app.dependency_overrides[get_database] points every
   repository (and so every service) at that database
3. Real Tokens: Users of every role are created in the database and
   signed bearer tokens are minted for them

Fixture Hierarchy:
    temp_db → users → auth → test_app → client
"""
import os
import tempfile

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

# Set the signing secret before importing config modules
# This must happen before any config imports
TEST_JWT_SECRET = "test-jwt-secret-for-testing-purposes-1234567890"
os.environ.setdefault("HOSPITAL_SVC_JWT_SECRET", TEST_JWT_SECRET)

from repositories.base import Database
from repositories import DoctorRepository, LabInventoryRepository, UserRepository
from models.user import Role
from core.auth import create_access_token
from core.exceptions import setup_exception_handlers
from core import dependencies as deps


@pytest.fixture
def temp_db():
    """
    Create a temporary database for testing.

    Each test gets a fresh SQLite file, ensuring complete isolation.
    """
    fd, db_path = tempfile.mkstemp(suffix='.db')
    os.close(fd)

    db = Database(db_path=db_path)
    yield db

    # Cleanup (WAL mode leaves -wal/-shm side files)
    for path in (db_path, f"{db_path}-wal", f"{db_path}-shm"):
        if os.path.exists(path):
            os.unlink(path)


@pytest.fixture
def user_repo(temp_db):
    return UserRepository(db=temp_db)


@pytest.fixture
def users(user_repo):
    """One active user per role, keyed by role name."""
    created = {}
    for role in Role:
        created[role.value] = user_repo.add(
            name=f"Test {role.value.replace('_', ' ').title()}",
            email=f"{role.value}@hospital.test",
            role=role.value,
        )
    return created


def bearer_headers(user_id: int, role: str, name: str = None) -> dict:
    """Authorization header carrying a freshly signed token."""
    token = create_access_token(user_id, role, name=name)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth(users):
    """
    Build request headers for a role: ``client.get(url, headers=auth("admin"))``.
    """
    def _headers(role: str) -> dict:
        user = users[role]
        return bearer_headers(user["id"], user["role"], name=user["name"])
    return _headers


@pytest.fixture
def doctor_profile(temp_db, users):
    """A doctor profile attached to the doctor-role user."""
    repo = DoctorRepository(db=temp_db)
    return repo.add(
        user_id=users["doctor"]["id"],
        specialization="Cardiology",
        license_number="SLMC-0001",
        qualifications=[],
        experience=8,
        schedule=[],
        max_patients_per_day=20,
    )


@pytest.fixture
def lab_inventory_repo(temp_db):
    return LabInventoryRepository(db=temp_db)


@pytest.fixture
def test_app(temp_db):
    """
    Create a FastAPI test app wired to the temporary database.

    - Uses the real routers (testing actual endpoint code)
    - Injects the test database via dependency_overrides
    - Registers exception handlers for proper error response testing
    """
    from api.routers import ALL_ROUTERS

    app = FastAPI(title="Hospital Service API Test")

    # Register exception handlers (same as production)
    setup_exception_handlers(app)

    app.dependency_overrides[deps.get_database] = lambda: temp_db

    for router in ALL_ROUTERS:
        app.include_router(router)

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
def client(test_app):
    """Create a test client for the API."""
    return TestClient(test_app)
