import os
import tempfile

# Settings are read once, on first import of the app
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["AVATAR_STORAGE_DIR"] = tempfile.mkdtemp(prefix="avatars-")
os.environ["PUBLIC_BASE_URL"] = "http://portal.test"
os.environ.pop("FEEDBACK_WEBHOOK_URL", None)
os.environ.pop("QUERY_SHARE_TTL_DAYS", None)

import pytest
from fastapi.testclient import TestClient

from mentor_portal.main import app
from mentor_portal.database import Base, engine, SessionLocal
from mentor_portal.core.change_feed import ChangeFeed
from mentor_portal.models import UserRole
from mentor_portal.security import create_access_token
from mentor_portal.services import IdentityService, MentorshipService, QueryService


def make_user(db, email, role=UserRole.MENTEE, full_name=None, password="secret123"):
    full_name = full_name or email.split("@")[0].replace(".", " ").title()
    return IdentityService(db).register(email, password, full_name, role, allow_any_role=True)

def auth_headers(user):
    token = create_access_token(data={"sub": user.email})
    return {"Authorization": f"Bearer {token}"}

def query_form(mentor_id, **overrides):
    form = {
        "mentor_id": mentor_id,
        "full_name": "Asha Verma",
        "course_program_year": "B.Tech CSE, 3rd year",
        "email": "asha.verma@university.edu",
        "mentorship_type": "career",
        "domain_guidance": "Data engineering",
        "query_description": "How do I prepare for data engineering internships?",
        "expected_outcome": "A preparation plan for the next six months.",
        "mentorship_duration": "short_term",
        "why_this_mentor": "You worked on data platforms after graduating.",
    }
    form.update(overrides)
    return form


@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def db_session(setup_database):
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture
def change_feed():
    feed = ChangeFeed()
    app.state.change_feed = feed
    return feed

@pytest.fixture
def client(change_feed):
    return TestClient(app)

@pytest.fixture
def mentor(db_session):
    return make_user(db_session, "ravi.mentor@university.edu", UserRole.MENTOR, "Ravi Kumar")

@pytest.fixture
def second_mentor(db_session):
    return make_user(db_session, "meera.mentor@university.edu", UserRole.MENTOR, "Meera Iyer")

@pytest.fixture
def mentee(db_session):
    return make_user(db_session, "asha.mentee@university.edu", UserRole.MENTEE, "Asha Verma")

@pytest.fixture
def second_mentee(db_session):
    return make_user(db_session, "kabir.mentee@university.edu", UserRole.MENTEE, "Kabir Singh")

@pytest.fixture
def admin(db_session):
    return make_user(db_session, "admin@university.edu", UserRole.ADMIN, "Portal Admin")

@pytest.fixture
def mentorship_service(db_session, change_feed):
    return MentorshipService(db_session, change_feed)

@pytest.fixture
def query_service(db_session, change_feed):
    return QueryService(db_session, change_feed)
