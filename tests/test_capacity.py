import pytest

from mentor_portal.models import MentorProfile
from mentor_portal.services import CapacityLedger
from mentor_portal.exceptions import BusinessLogicError
from conftest import auth_headers


def test_profile_is_created_lazily_with_defaults(db_session, mentor):
    assert db_session.query(MentorProfile).count() == 0
    profile = CapacityLedger(db_session).get_or_create(mentor.id)
    assert (profile.max_mentees, profile.current_mentees, profile.is_available) == (5, 0, True)
    assert db_session.query(MentorProfile).count() == 1


@pytest.mark.parametrize("value", [0, 21])
def test_capacity_outside_bounds_is_rejected(client, mentor, value):
    response = client.put("/api/mentor/capacity", json={"max_mentees": value}, headers=auth_headers(mentor))
    assert response.status_code == 422


@pytest.mark.parametrize("value", [1, 20])
def test_capacity_bounds_are_inclusive(client, mentor, value):
    response = client.put("/api/mentor/capacity", json={"max_mentees": value}, headers=auth_headers(mentor))
    assert response.status_code == 200
    assert response.json()["max_mentees"] == value


def test_ledger_validates_bounds_itself(db_session, mentor):
    with pytest.raises(BusinessLogicError):
        CapacityLedger(db_session).set_max_capacity(mentor.id, 25)


def test_availability_toggle(client, mentor):
    response = client.put("/api/mentor/availability", json={"is_available": False}, headers=auth_headers(mentor))
    assert response.status_code == 200
    assert response.json()["is_available"] is False


def test_mentees_cannot_change_capacity(client, mentee):
    response = client.put("/api/mentor/capacity", json={"max_mentees": 3}, headers=auth_headers(mentee))
    assert response.status_code == 403


def test_claim_slot_stops_at_capacity(db_session, mentor):
    ledger = CapacityLedger(db_session)
    ledger.set_max_capacity(mentor.id, 2)
    assert ledger.claim_slot(mentor.id) is True
    assert ledger.claim_slot(mentor.id) is True
    assert ledger.claim_slot(mentor.id) is False
    db_session.commit()

    profile = ledger.get_or_create(mentor.id)
    db_session.refresh(profile)
    assert profile.current_mentees == 2
    assert CapacityLedger.has_capacity(profile) is False


def test_release_slot_never_goes_negative(db_session, mentor):
    ledger = CapacityLedger(db_session)
    ledger.get_or_create(mentor.id)
    ledger.release_slot(mentor.id)
    db_session.commit()

    profile = ledger.get_or_create(mentor.id)
    db_session.refresh(profile)
    assert profile.current_mentees == 0
