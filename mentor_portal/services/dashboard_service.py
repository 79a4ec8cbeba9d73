# mentor_portal/services/dashboard_service.py
import logging
from datetime import date, datetime, timedelta
from typing import Dict, Any, List, Optional, Tuple
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models import MentorshipRequest, ActiveMentorship, MenteeQuery, RequestStatus, ActivityPeriod, utcnow
from .capacity_service import CapacityLedger

logger = logging.getLogger(__name__)

# How many buckets each chart shows, ending with the current one
BUCKET_COUNTS = {
    ActivityPeriod.DAY: 7,
    ActivityPeriod.MONTH: 6,
    ActivityPeriod.YEAR: 3,
}

LABEL_FORMATS = {
    ActivityPeriod.DAY: "%b %d",
    ActivityPeriod.MONTH: "%b",
    ActivityPeriod.YEAR: "%Y",
}


def bucket_key(period: ActivityPeriod, moment: datetime) -> Tuple[int, ...]:
    if period == ActivityPeriod.DAY:
        return (moment.year, moment.month, moment.day)
    if period == ActivityPeriod.MONTH:
        return (moment.year, moment.month)
    return (moment.year,)


def recent_buckets(period: ActivityPeriod, now: Optional[datetime] = None) -> List[Tuple[Tuple[int, ...], str]]:
    """Oldest-first (key, label) pairs for the last N days, months or years"""
    now = now or utcnow()
    count = BUCKET_COUNTS[period]
    starts: List[date] = []
    if period == ActivityPeriod.DAY:
        today = now.date()
        starts = [today - timedelta(days=offset) for offset in range(count - 1, -1, -1)]
    elif period == ActivityPeriod.MONTH:
        for offset in range(count - 1, -1, -1):
            months = now.year * 12 + now.month - 1 - offset
            starts.append(date(months // 12, months % 12 + 1, 1))
    else:
        starts = [date(now.year - offset, 1, 1) for offset in range(count - 1, -1, -1)]
    return [(bucket_key(period, start), start.strftime(LABEL_FORMATS[period])) for start in starts]


class DashboardService:
    def __init__(self, db: Session):
        self.db = db
        self.ledger = CapacityLedger(db)

    def get_mentee_stats(self, mentee_id: int) -> Dict[str, int]:
        counts = self._request_counts(MentorshipRequest.mentee_id == mentee_id)
        active_mentors = self.db.query(func.count(ActiveMentorship.id)).filter(
            ActiveMentorship.mentee_id == mentee_id,
            ActiveMentorship.ended_at.is_(None)
        ).scalar()
        queries_sent = self.db.query(func.count(MenteeQuery.id)).filter(
            MenteeQuery.mentee_id == mentee_id
        ).scalar()
        return {
            "accepted_requests": counts.get(RequestStatus.ACCEPTED.value, 0),
            "pending_requests": counts.get(RequestStatus.PENDING.value, 0),
            "active_mentors": active_mentors or 0,
            "queries_sent": queries_sent or 0,
        }

    def get_mentor_stats(self, mentor_id: int) -> Dict[str, Any]:
        profile = self.ledger.get_or_create(mentor_id)
        counts = self._request_counts(MentorshipRequest.mentor_id == mentor_id)
        active_mentees = self.db.query(func.count(ActiveMentorship.id)).filter(
            ActiveMentorship.mentor_id == mentor_id,
            ActiveMentorship.ended_at.is_(None)
        ).scalar()
        queries_received = self.db.query(func.count(MenteeQuery.id)).filter(
            MenteeQuery.mentor_id == mentor_id
        ).scalar()
        unanswered = self.db.query(func.count(MenteeQuery.id)).filter(
            MenteeQuery.mentor_id == mentor_id,
            MenteeQuery.mentor_reply.is_(None)
        ).scalar()
        return {
            "pending_requests": counts.get(RequestStatus.PENDING.value, 0),
            "active_mentees": active_mentees or 0,
            "current_mentees": profile.current_mentees or 0,
            "max_mentees": profile.max_mentees,
            "is_available": profile.is_available,
            "queries_received": queries_received or 0,
            "unanswered_queries": unanswered or 0,
        }

    def get_mentor_activity(self, mentor_id: int, period: ActivityPeriod = ActivityPeriod.MONTH,
                            now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Requests received per bucket, split by the status each one ended up in"""
        buckets = recent_buckets(period, now)
        series = {key: {"label": label, "received": 0, "accepted": 0, "rejected": 0} for key, label in buckets}

        rows = self.db.query(MentorshipRequest.created_at, MentorshipRequest.status).filter(
            MentorshipRequest.mentor_id == mentor_id
        ).all()
        for created_at, status in rows:
            point = series.get(bucket_key(period, created_at))
            if point is None:
                continue
            point["received"] += 1
            if status == RequestStatus.ACCEPTED.value:
                point["accepted"] += 1
            elif status == RequestStatus.REJECTED.value:
                point["rejected"] += 1
        return [series[key] for key, _ in buckets]

    def get_mentee_activity(self, mentee_id: int, period: ActivityPeriod = ActivityPeriod.MONTH,
                            now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Cumulative count of mentorships started up to and including each bucket"""
        started = [
            bucket_key(period, row[0]) for row in self.db.query(ActiveMentorship.started_at).filter(
                ActiveMentorship.mentee_id == mentee_id
            )
        ]
        return [
            {"label": label, "mentorships": sum(1 for key in started if key <= bucket)}
            for bucket, label in recent_buckets(period, now)
        ]

    def _request_counts(self, condition) -> Dict[str, int]:
        rows = self.db.query(MentorshipRequest.status, func.count(MentorshipRequest.id)).filter(
            condition
        ).group_by(MentorshipRequest.status).all()
        return {status: count for status, count in rows}
