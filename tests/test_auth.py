from pathlib import Path

from mentor_portal.config import get_settings
from mentor_portal.models import User, Profile, UserRoleAssignment
from conftest import auth_headers

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def register(client, email, role="mentee", password="secret123", full_name="Test Person"):
    return client.post("/register", json={
        "email": email, "password": password, "full_name": full_name, "role": role,
    })


def test_register_mentee_creates_user_profile_and_role(client, db_session):
    response = register(client, "New.Student@University.edu")
    assert response.status_code == 201
    body = response.json()
    assert body["email"] == "new.student@university.edu"
    assert body["role"] == "mentee"
    assert body["dashboard_path"] == "/dashboard/mentee"

    user = db_session.query(User).filter(User.email == "new.student@university.edu").one()
    assert db_session.query(Profile).filter(Profile.user_id == user.id).one().role == "mentee"
    assert db_session.query(UserRoleAssignment).filter(UserRoleAssignment.user_id == user.id).one().role == "mentee"


def test_register_mentor_lands_on_mentor_dashboard(client):
    response = register(client, "prof@university.edu", role="mentor")
    assert response.status_code == 201
    assert response.json()["dashboard_path"] == "/dashboard/mentor"


def test_self_signup_cannot_claim_admin_role(client):
    response = register(client, "sneaky@university.edu", role="admin")
    assert response.status_code == 403


def test_duplicate_email_is_a_conflict(client):
    assert register(client, "twice@university.edu").status_code == 201
    response = register(client, "TWICE@university.edu")
    assert response.status_code == 409
    assert response.json()["detail"] == "Email already registered"


def test_register_rejects_bad_email_and_short_password(client):
    assert register(client, "not-an-email").status_code == 422
    assert register(client, "short@university.edu", password="123").status_code == 422


def test_login_sets_cookie_and_token_works(client):
    register(client, "login@university.edu", role="mentor", full_name="Login Mentor")
    response = client.post("/token", data={"username": "login@university.edu", "password": "secret123"})
    assert response.status_code == 200
    token = response.json()["access_token"]
    assert "access_token" in response.cookies

    me = client.get("/users/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["full_name"] == "Login Mentor"
    assert me.json()["role"] == "mentor"


def test_cookie_alone_authenticates(client):
    register(client, "cookie@university.edu")
    client.post("/token", data={"username": "cookie@university.edu", "password": "secret123"})
    assert client.get("/users/me").status_code == 200


def test_wrong_password_is_rejected(client):
    register(client, "wrongpw@university.edu")
    response = client.post("/token", data={"username": "wrongpw@university.edu", "password": "nope-nope"})
    assert response.status_code == 401


def test_invalid_token_is_rejected(client):
    response = client.get("/users/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_logout_clears_cookie(client):
    register(client, "bye@university.edu")
    client.post("/token", data={"username": "bye@university.edu", "password": "secret123"})
    assert client.post("/logout").status_code == 200
    assert client.get("/users/me").status_code == 401


def test_update_display_name(client, mentee):
    response = client.put("/users/me", json={"full_name": "Asha V."}, headers=auth_headers(mentee))
    assert response.status_code == 200
    assert response.json()["full_name"] == "Asha V."


def test_avatar_upload_replaces_previous_file(client, mentee):
    headers = auth_headers(mentee)
    first = client.post("/users/me/avatar", files={"file": ("me.png", PNG_BYTES, "image/png")}, headers=headers)
    assert first.status_code == 200
    assert first.json()["avatar_url"] == f"/avatars/{mentee.id}/avatar.png"

    second = client.post("/users/me/avatar", files={"file": ("me.jpg", b"\xff\xd8\xff" + b"\x00" * 32, "image/jpeg")}, headers=headers)
    assert second.status_code == 200
    assert second.json()["avatar_url"] == f"/avatars/{mentee.id}/avatar.jpg"

    user_dir = Path(get_settings().AVATAR_STORAGE_DIR) / str(mentee.id)
    assert [p.name for p in user_dir.iterdir()] == ["avatar.jpg"]
    assert client.get("/users/me", headers=headers).json()["avatar_url"] == f"/avatars/{mentee.id}/avatar.jpg"


def test_avatar_upload_rejects_non_images(client, mentee):
    response = client.post(
        "/users/me/avatar", files={"file": ("notes.txt", b"hello", "text/plain")}, headers=auth_headers(mentee)
    )
    assert response.status_code == 400


def test_health_reports_database(client):
    body = client.get("/health").json()
    assert body["status"] == "healthy"
    assert body["database"] == "ok"
