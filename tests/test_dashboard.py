from datetime import datetime, timezone

from mentor_portal.models import ActiveMentorship, ActivityPeriod
from mentor_portal.services import DashboardService
from mentor_portal.services.dashboard_service import recent_buckets
from conftest import auth_headers, query_form

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


def test_bucket_labels():
    assert [label for _, label in recent_buckets(ActivityPeriod.DAY, NOW)] == [
        "Mar 09", "Mar 10", "Mar 11", "Mar 12", "Mar 13", "Mar 14", "Mar 15",
    ]
    assert [label for _, label in recent_buckets(ActivityPeriod.MONTH, NOW)] == ["Oct", "Nov", "Dec", "Jan", "Feb", "Mar"]
    assert [label for _, label in recent_buckets(ActivityPeriod.YEAR, NOW)] == ["2024", "2025", "2026"]


def test_mentor_activity_counts_by_outcome(db_session, mentorship_service, mentor, mentee, second_mentee):
    accepted = mentorship_service.create_request(mentee.id, mentor.id, "Hello", "Guidance")
    rejected = mentorship_service.create_request(second_mentee.id, mentor.id, "Hello", "Guidance")
    mentorship_service.accept_request(accepted.id, mentor.id)
    mentorship_service.reject_request(rejected.id, mentor.id)

    series = DashboardService(db_session).get_mentor_activity(mentor.id, ActivityPeriod.YEAR)
    assert len(series) == 3
    assert [p["received"] for p in series] == [0, 0, 2]
    assert (series[-1]["accepted"], series[-1]["rejected"]) == (1, 1)


def test_mentee_activity_is_cumulative(db_session, mentor, second_mentor, mentee):
    db_session.add_all([
        ActiveMentorship(mentor_id=mentor.id, mentee_id=mentee.id, started_at=datetime(2025, 11, 3, tzinfo=timezone.utc)),
        ActiveMentorship(mentor_id=second_mentor.id, mentee_id=mentee.id, started_at=datetime(2026, 2, 20, tzinfo=timezone.utc)),
    ])
    db_session.commit()

    series = DashboardService(db_session).get_mentee_activity(mentee.id, ActivityPeriod.MONTH, now=NOW)
    assert [(p["label"], p["mentorships"]) for p in series] == [
        ("Oct", 0), ("Nov", 1), ("Dec", 1), ("Jan", 1), ("Feb", 2), ("Mar", 2),
    ]


def test_dashboard_stats(client, mentorship_service, query_service, mentor, second_mentor, mentee):
    accepted = mentorship_service.create_request(mentee.id, mentor.id, "Hello", "Guidance")
    mentorship_service.accept_request(accepted.id, mentor.id)
    mentorship_service.create_request(mentee.id, second_mentor.id, "Hello", "Guidance")
    query_service.submit_query(mentee.id, mentor.id, query_form(mentor.id))

    mentee_stats = client.get("/api/mentee/stats", headers=auth_headers(mentee)).json()
    assert mentee_stats == {"accepted_requests": 1, "pending_requests": 1, "active_mentors": 1, "queries_sent": 1}

    mentor_stats = client.get("/api/mentor/stats", headers=auth_headers(mentor)).json()
    assert mentor_stats["active_mentees"] == 1
    assert mentor_stats["current_mentees"] == 1
    assert mentor_stats["max_mentees"] == 5
    assert mentor_stats["unanswered_queries"] == 1


def test_activity_endpoint_validates_period(client, mentor):
    headers = auth_headers(mentor)
    assert len(client.get("/api/mentor/activity?period=day", headers=headers).json()) == 7
    assert client.get("/api/mentor/activity?period=week", headers=headers).status_code == 422
