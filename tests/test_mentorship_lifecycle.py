import pytest

from mentor_portal.models import MentorshipRequest, ActiveMentorship, MentorProfile, RequestStatus
from mentor_portal.services import CapacityLedger
from mentor_portal.utils.validation_utils import ValidationUtils
from mentor_portal.exceptions import (
    CapacityExceededError, DuplicateRequestError, InvalidStatusTransitionError,
    MentorUnavailableError, NotFoundError,
)
from conftest import auth_headers


def send_request(client, mentee, mentor_id, introduction="Hi, I am a third year student.", goals="Career guidance."):
    return client.post("/api/requests", json={
        "mentor_id": mentor_id, "introduction": introduction, "goals": goals,
    }, headers=auth_headers(mentee))


def occupancy(db_session, mentor_id):
    db_session.expire_all()
    return db_session.query(MentorProfile).filter(MentorProfile.user_id == mentor_id).one().current_mentees


def test_request_then_accept_creates_active_mentorship(client, db_session, mentor, mentee):
    created = send_request(client, mentee, mentor.id)
    assert created.status_code == 201
    assert created.json()["status"] == "pending"
    assert created.json()["mentor_name"] == "Ravi Kumar"

    request_id = created.json()["id"]
    accepted = client.put(f"/api/mentor/requests/{request_id}/accept", headers=auth_headers(mentor))
    assert accepted.status_code == 200
    assert accepted.json()["status"] == "accepted"

    mentorships = db_session.query(ActiveMentorship).filter(ActiveMentorship.mentee_id == mentee.id).all()
    assert len(mentorships) == 1
    assert mentorships[0].mentor_id == mentor.id
    assert mentorships[0].request_id == request_id
    assert occupancy(db_session, mentor.id) == 1

    my_mentors = client.get("/api/mentee/mentors", headers=auth_headers(mentee)).json()
    assert [m["counterpart_name"] for m in my_mentors] == ["Ravi Kumar"]
    my_mentees = client.get("/api/mentor/mentees", headers=auth_headers(mentor)).json()
    assert [m["counterpart_name"] for m in my_mentees] == ["Asha Verma"]


def test_reject_with_reason_creates_no_mentorship(client, db_session, mentor, mentee):
    request_id = send_request(client, mentee, mentor.id).json()["id"]
    rejected = client.put(
        f"/api/mentor/requests/{request_id}/reject",
        json={"rejection_message": "Fully booked this semester."},
        headers=auth_headers(mentor),
    )
    assert rejected.status_code == 200
    assert rejected.json()["status"] == "rejected"
    assert rejected.json()["rejection_message"] == "Fully booked this semester."
    assert db_session.query(ActiveMentorship).count() == 0


def test_reject_without_body_stores_no_reason(client, mentor, mentee):
    request_id = send_request(client, mentee, mentor.id).json()["id"]
    rejected = client.put(f"/api/mentor/requests/{request_id}/reject", headers=auth_headers(mentor))
    assert rejected.status_code == 200
    assert rejected.json()["rejection_message"] is None


def test_accepted_and_rejected_are_terminal(client, mentor, mentee, second_mentee):
    accepted_id = send_request(client, mentee, mentor.id).json()["id"]
    rejected_id = send_request(client, second_mentee, mentor.id).json()["id"]
    headers = auth_headers(mentor)
    client.put(f"/api/mentor/requests/{accepted_id}/accept", headers=headers)
    client.put(f"/api/mentor/requests/{rejected_id}/reject", headers=headers)

    assert client.put(f"/api/mentor/requests/{accepted_id}/reject", headers=headers).status_code == 400
    assert client.put(f"/api/mentor/requests/{accepted_id}/accept", headers=headers).status_code == 400
    assert client.put(f"/api/mentor/requests/{rejected_id}/accept", headers=headers).status_code == 400


def test_introduction_length_boundary(client, db_session, mentor, mentee):
    too_long = send_request(client, mentee, mentor.id, introduction="x" * 501)
    assert too_long.status_code == 422
    assert db_session.query(MentorshipRequest).count() == 0

    at_limit = send_request(client, mentee, mentor.id, introduction="x" * 500)
    assert at_limit.status_code == 201


def test_request_text_is_trimmed_before_the_length_limit(client, mentor, mentee):
    response = send_request(client, mentee, mentor.id, introduction="  " + "x" * 500 + "\n", goals=" Career guidance. ")
    assert response.status_code == 201
    assert response.json()["introduction"] == "x" * 500
    assert response.json()["goals"] == "Career guidance."


def test_blank_goals_are_rejected(client, db_session, mentor, mentee):
    response = send_request(client, mentee, mentor.id, goals="   ")
    assert response.status_code == 422
    assert db_session.query(MentorshipRequest).count() == 0


def test_second_request_to_same_mentor_is_refused_even_after_rejection(client, mentor, mentee):
    request_id = send_request(client, mentee, mentor.id).json()["id"]
    duplicate = send_request(client, mentee, mentor.id)
    assert duplicate.status_code == 409
    assert duplicate.json()["detail"] == "You have already sent a request to this mentor."

    client.put(f"/api/mentor/requests/{request_id}/reject", headers=auth_headers(mentor))
    assert send_request(client, mentee, mentor.id).status_code == 409


def test_request_to_non_mentor_is_not_found(client, mentee, second_mentee):
    assert send_request(client, mentee, second_mentee.id).status_code == 404


def test_only_mentees_can_send_requests(client, mentor, second_mentor):
    assert send_request(client, second_mentor, mentor.id).status_code == 403


def test_another_mentor_cannot_act_on_request(client, mentor, second_mentor, mentee):
    request_id = send_request(client, mentee, mentor.id).json()["id"]
    response = client.put(f"/api/mentor/requests/{request_id}/accept", headers=auth_headers(second_mentor))
    assert response.status_code == 404


def test_unavailable_mentor_refuses_requests(db_session, mentorship_service, mentor, mentee):
    CapacityLedger(db_session).set_availability(mentor.id, False)
    with pytest.raises(MentorUnavailableError):
        mentorship_service.create_request(mentee.id, mentor.id, "Hello", "Guidance")
    assert db_session.query(MentorshipRequest).count() == 0


def test_full_mentor_refuses_requests(db_session, mentorship_service, mentor, mentee, second_mentee):
    CapacityLedger(db_session).set_max_capacity(mentor.id, 1)
    request = mentorship_service.create_request(mentee.id, mentor.id, "Hello", "Guidance")
    mentorship_service.accept_request(request.id, mentor.id)

    with pytest.raises(CapacityExceededError):
        mentorship_service.create_request(second_mentee.id, mentor.id, "Hello", "Guidance")


def test_accept_at_capacity_rolls_back(db_session, mentorship_service, mentor, mentee, second_mentee):
    first = mentorship_service.create_request(mentee.id, mentor.id, "Hello", "Guidance")
    second = mentorship_service.create_request(second_mentee.id, mentor.id, "Hello", "Guidance")
    CapacityLedger(db_session).set_max_capacity(mentor.id, 1)

    mentorship_service.accept_request(first.id, mentor.id)
    with pytest.raises(CapacityExceededError):
        mentorship_service.accept_request(second.id, mentor.id)

    db_session.expire_all()
    assert db_session.get(MentorshipRequest, second.id).status == RequestStatus.PENDING.value
    assert db_session.query(ActiveMentorship).filter(ActiveMentorship.mentee_id == second_mentee.id).count() == 0
    assert occupancy(db_session, mentor.id) == 1


def test_duplicate_check_in_service(mentorship_service, mentor, mentee):
    mentorship_service.create_request(mentee.id, mentor.id, "Hello", "Guidance")
    with pytest.raises(DuplicateRequestError):
        mentorship_service.create_request(mentee.id, mentor.id, "Hello again", "Guidance")


def test_pending_pair_index_turns_a_lost_race_into_a_conflict(client, db_session, monkeypatch, mentor, mentee):
    db_session.add(MentorshipRequest(mentee_id=mentee.id, mentor_id=mentor.id, introduction="Hello", goals="Guidance"))
    db_session.commit()
    # Let the insert reach the database as if a concurrent submission slipped past the read
    monkeypatch.setattr(ValidationUtils, "check_no_existing_request", lambda self, mentee_id, mentor_id: None)

    response = send_request(client, mentee, mentor.id)
    assert response.status_code == 409
    assert db_session.query(MentorshipRequest).count() == 1


def test_accept_rolls_back_when_pair_already_has_a_live_mentorship(db_session, mentorship_service, mentor, mentee):
    request = mentorship_service.create_request(mentee.id, mentor.id, "Hello", "Guidance")
    db_session.add(ActiveMentorship(mentor_id=mentor.id, mentee_id=mentee.id))
    db_session.commit()

    with pytest.raises(DuplicateRequestError):
        mentorship_service.accept_request(request.id, mentor.id)

    db_session.expire_all()
    assert db_session.get(MentorshipRequest, request.id).status == RequestStatus.PENDING.value
    assert db_session.query(ActiveMentorship).count() == 1
    assert occupancy(db_session, mentor.id) == 0


def test_end_mentorship_frees_the_slot(client, db_session, mentorship_service, mentor, mentee):
    request = mentorship_service.create_request(mentee.id, mentor.id, "Hello", "Guidance")
    mentorship_service.accept_request(request.id, mentor.id)
    mentorship = db_session.query(ActiveMentorship).one()
    assert occupancy(db_session, mentor.id) == 1

    ended = client.put(f"/api/mentorships/{mentorship.id}/end", headers=auth_headers(mentee))
    assert ended.status_code == 200
    assert ended.json()["ended_at"] is not None
    assert occupancy(db_session, mentor.id) == 0
    assert client.get("/api/mentee/mentors", headers=auth_headers(mentee)).json() == []

    again = client.put(f"/api/mentorships/{mentorship.id}/end", headers=auth_headers(mentor))
    assert again.status_code == 400


def test_outsider_cannot_end_mentorship(db_session, mentorship_service, mentor, mentee, second_mentee):
    request = mentorship_service.create_request(mentee.id, mentor.id, "Hello", "Guidance")
    mentorship_service.accept_request(request.id, mentor.id)
    mentorship = db_session.query(ActiveMentorship).one()
    with pytest.raises(NotFoundError):
        mentorship_service.end_mentorship(mentorship.id, second_mentee.id)


def test_request_lists_are_newest_first(client, mentor, second_mentor, mentee, second_mentee):
    send_request(client, mentee, mentor.id)
    send_request(client, second_mentee, mentor.id)
    send_request(client, mentee, second_mentor.id)

    for_mentor = client.get("/api/mentor/requests", headers=auth_headers(mentor)).json()
    assert [r["mentee_name"] for r in for_mentor] == ["Kabir Singh", "Asha Verma"]
    assert all("mentee_profile" in r for r in for_mentor)

    for_mentee = client.get("/api/mentee/requests", headers=auth_headers(mentee)).json()
    assert [r["mentor_name"] for r in for_mentee] == ["Meera Iyer", "Ravi Kumar"]


def test_request_list_status_filter(client, mentor, mentee, second_mentee):
    first_id = send_request(client, mentee, mentor.id).json()["id"]
    send_request(client, second_mentee, mentor.id)
    client.put(f"/api/mentor/requests/{first_id}/accept", headers=auth_headers(mentor))

    pending = client.get("/api/mentor/requests?status=pending", headers=auth_headers(mentor)).json()
    assert [r["mentee_name"] for r in pending] == ["Kabir Singh"]


def test_double_accept_is_refused(mentorship_service, mentor, mentee):
    request = mentorship_service.create_request(mentee.id, mentor.id, "Hello", "Guidance")
    mentorship_service.accept_request(request.id, mentor.id)
    with pytest.raises(InvalidStatusTransitionError):
        mentorship_service.accept_request(request.id, mentor.id)
