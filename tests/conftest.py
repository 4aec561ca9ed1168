"""
Shared fixtures.

Services run against an in-memory mongomock database with the same
indexes as production, so unique constraints behave like MongoDB's.
"""

import uuid

import mongomock
import pytest
from fastapi.testclient import TestClient

from app.core.auth import create_admin_token
from app.core.config import get_settings
from app.db.mongodb import init_mongo_indexes
from app.main import app
from app.schemas.schemas import StudentRegisterRequest
from app.services.admin_service import AdminService, get_admin_service
from app.services.allow_list import AllowList
from app.services.job_service import JobService, get_job_service
from app.services.student_service import StudentService, get_student_service

APPROVED_ROLL = "CS101"
PASSWORD = "s3cret-pass"


class StaticAllowList(AllowList):
    """Allow-list over a fixed set of roll numbers."""

    def __init__(self, roll_numbers=()):
        self.roll_numbers = set(roll_numbers)

    def contains(self, roll_number: str) -> bool:
        return roll_number in self.roll_numbers


@pytest.fixture
def mongo_db():
    # mongomock clients share storage, so each test gets its own database
    mongo_client = mongomock.MongoClient()
    name = f"portal_test_{uuid.uuid4().hex}"
    db = mongo_client[name]
    init_mongo_indexes(db)
    yield db
    mongo_client.drop_database(name)


@pytest.fixture
def allow_list():
    return StaticAllowList({APPROVED_ROLL})


@pytest.fixture
def student_service(mongo_db, allow_list):
    return StudentService(
        students=mongo_db.students,
        applications=mongo_db.applications,
        allow_list=allow_list,
    )


@pytest.fixture
def job_service(mongo_db):
    return JobService(
        jobs=mongo_db.jobs,
        applications=mongo_db.applications,
        students=mongo_db.students,
    )


@pytest.fixture
def admin_service(mongo_db):
    return AdminService(admins=mongo_db.admins)


@pytest.fixture
def registration_payload():
    """JSON body for POST /api/student/register (pending roll number)."""
    return {
        "name": "Asha Verma",
        "email": "Asha@Example.com ",
        "password": PASSWORD,
        "rollNumber": " CS999 ",
        "course": "B.Tech",
        "branch": "CSE",
        "year": 3,
        "phoneNumber": "9876543210",
    }


@pytest.fixture
def make_registration():
    """Build a StudentRegisterRequest, overriding any field."""

    def _make(**overrides):
        data = {
            "name": "Asha Verma",
            "email": "asha@example.com",
            "password": PASSWORD,
            "roll_number": "CS999",
            "course": "B.Tech",
            "branch": "CSE",
            "year": 3,
            "phone_number": "9876543210",
        }
        data.update(overrides)
        return StudentRegisterRequest(**data)

    return _make


@pytest.fixture
def client(student_service, job_service, admin_service):
    app.dependency_overrides[get_student_service] = lambda: student_service
    app.dependency_overrides[get_job_service] = lambda: job_service
    app.dependency_overrides[get_admin_service] = lambda: admin_service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_client(client):
    """Client carrying a valid admin session cookie."""
    token = create_admin_token({"_id": "000000000000000000000001", "email": "admin@college.edu"})
    client.cookies.set(get_settings().admin_cookie_name, token)
    return client
