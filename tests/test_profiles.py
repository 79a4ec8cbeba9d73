from mentor_portal.models import MenteeProfile
from conftest import auth_headers


def test_mentee_profile_is_created_on_first_visit(client, db_session, mentee):
    response = client.get("/api/mentee/profile", headers=auth_headers(mentee))
    assert response.status_code == 200
    assert response.json()["user_id"] == mentee.id
    assert db_session.query(MenteeProfile).count() == 1


def test_mentor_profile_update_normalises_tags(client, mentor):
    response = client.put("/api/mentor/profile", json={
        "mentor_type": "alumni",
        "bio": "Data engineer at a fintech.",
        "expertise": " Python, SQL ,, Spark ",
        "areas_of_guidance": ["Internships", "  "],
        "full_name": "Ravi K.",
    }, headers=auth_headers(mentor))
    assert response.status_code == 200
    body = response.json()
    assert body["mentor_type"] == "alumni"
    assert body["expertise"] == ["Python", "SQL", "Spark"]
    assert body["areas_of_guidance"] == ["Internships"]

    me = client.get("/users/me", headers=auth_headers(mentor)).json()
    assert me["full_name"] == "Ravi K."


def test_mentee_profile_update(client, mentee):
    response = client.put("/api/mentee/profile", json={
        "course": "B.Tech", "specialisation": "CSE", "year": "3", "interests": "ML, Web",
    }, headers=auth_headers(mentee))
    assert response.status_code == 200
    assert response.json()["interests"] == ["ML", "Web"]


def test_role_profiles_are_role_gated(client, mentor, mentee):
    assert client.get("/api/mentor/profile", headers=auth_headers(mentee)).status_code == 403
    assert client.get("/api/mentee/profile", headers=auth_headers(mentor)).status_code == 403


def test_browse_flags_for_mentee(client, mentorship_service, mentor, second_mentor, mentee):
    client.put("/api/mentor/profile", json={"bio": "Backend systems", "expertise": "Go, Kubernetes"}, headers=auth_headers(mentor))
    client.put("/api/mentor/profile", json={"mentor_type": "faculty", "bio": "Research methods"}, headers=auth_headers(second_mentor))
    request = mentorship_service.create_request(mentee.id, mentor.id, "Hello", "Guidance")

    cards = client.get("/api/mentors", headers=auth_headers(mentee)).json()
    by_name = {card["full_name"]: card for card in cards}
    assert set(by_name) == {"Ravi Kumar", "Meera Iyer"}
    assert by_name["Ravi Kumar"]["has_pending_request"] is True
    assert by_name["Ravi Kumar"]["can_request"] is False
    assert by_name["Meera Iyer"]["can_request"] is True

    mentorship_service.accept_request(request.id, mentor.id)
    card = client.get(f"/api/mentors/{mentor.id}", headers=auth_headers(mentee)).json()
    assert card["is_connected"] is True
    assert card["has_pending_request"] is False
    assert card["current_mentees"] == 1


def test_browse_filters(client, mentor, second_mentor, mentee):
    client.put("/api/mentor/profile", json={"bio": "Backend systems", "expertise": "Go, Kubernetes"}, headers=auth_headers(mentor))
    client.put("/api/mentor/profile", json={"mentor_type": "faculty", "is_available": False}, headers=auth_headers(second_mentor))
    headers = auth_headers(mentee)

    assert [c["full_name"] for c in client.get("/api/mentors?search=kubernetes", headers=headers).json()] == ["Ravi Kumar"]
    assert [c["full_name"] for c in client.get("/api/mentors?mentor_type=faculty", headers=headers).json()] == ["Meera Iyer"]
    assert [c["full_name"] for c in client.get("/api/mentors?available_only=true", headers=headers).json()] == ["Ravi Kumar"]


def test_unknown_mentor_card_is_not_found(client, mentee):
    assert client.get("/api/mentors/4242", headers=auth_headers(mentee)).status_code == 404
