# mentor_portal/utils/response_enricher.py
from typing import Dict, Any, List, Optional
from ..config import get_settings
from ..constants import MENTORSHIP_TYPE_LABELS, DURATION_LABELS
from ..models import User, MentorshipRequest, ActiveMentorship, MenteeQuery
from ..schemas import (
    MentorshipRequestResponse, ActiveMentorshipResponse, MenteeQueryResponse, SharedQueryResponse,
    MentorProfileResponse, MenteeProfileResponse,
)


def display_name(user: Optional[User], fallback: str = "Unknown") -> str:
    if user is not None and user.profile is not None and user.profile.full_name:
        return user.profile.full_name
    return fallback

def avatar_url(user: Optional[User]) -> Optional[str]:
    if user is not None and user.profile is not None:
        return user.profile.avatar_url
    return None

def share_url(token: str) -> str:
    return f"{get_settings().PUBLIC_BASE_URL.rstrip('/')}/query/{token}"


class ResponseEnricher:
    @staticmethod
    def enrich_requests(requests: List[MentorshipRequest], include_mentee_profile: bool = False) -> List[Dict[str, Any]]:
        """Enriches mentorship requests with mentor/mentee names"""
        enriched = []
        for req in requests:
            req_dict = MentorshipRequestResponse.model_validate(req).model_dump()
            req_dict['mentor_name'] = display_name(req.mentor, f"Mentor {req.mentor_id}")
            req_dict['mentee_name'] = display_name(req.mentee, f"Mentee {req.mentee_id}")
            req_dict['mentor_avatar_url'] = avatar_url(req.mentor)
            req_dict['mentee_avatar_url'] = avatar_url(req.mentee)
            if include_mentee_profile and req.mentee is not None and req.mentee.mentee_profile is not None:
                req_dict['mentee_profile'] = MenteeProfileResponse.model_validate(req.mentee.mentee_profile).model_dump()
            enriched.append(req_dict)
        return enriched

    @staticmethod
    def enrich_single_request(request: MentorshipRequest) -> Dict[str, Any]:
        """Enriches a single mentorship request"""
        return ResponseEnricher.enrich_requests([request])[0]

    @staticmethod
    def enrich_mentorships(mentorships: List[ActiveMentorship], viewer_id: int) -> List[Dict[str, Any]]:
        """Adds the other party's contact details and role profile to each mentorship"""
        enriched = []
        for mentorship in mentorships:
            item = ActiveMentorshipResponse.model_validate(mentorship).model_dump()
            viewer_is_mentor = mentorship.mentor_id == viewer_id
            counterpart = mentorship.mentee if viewer_is_mentor else mentorship.mentor
            item['counterpart_name'] = display_name(counterpart)
            item['counterpart_email'] = counterpart.profile.email if counterpart is not None and counterpart.profile else None
            item['counterpart_avatar_url'] = avatar_url(counterpart)
            if counterpart is not None:
                if viewer_is_mentor and counterpart.mentee_profile is not None:
                    item['mentee_profile'] = MenteeProfileResponse.model_validate(counterpart.mentee_profile).model_dump()
                if not viewer_is_mentor and counterpart.mentor_profile is not None:
                    item['mentor_profile'] = MentorProfileResponse.model_validate(counterpart.mentor_profile).model_dump()
            enriched.append(item)
        return enriched

    @staticmethod
    def enrich_queries(queries: List[MenteeQuery]) -> List[Dict[str, Any]]:
        enriched = []
        for query in queries:
            item = MenteeQueryResponse.model_validate(query).model_dump()
            item['mentor_name'] = display_name(query.mentor)
            item['mentee_name'] = display_name(query.mentee)
            item['share_url'] = share_url(query.share_token)
            item['reply_status'] = "Replied" if query.mentor_reply else "Awaiting reply"
            enriched.append(item)
        return enriched

    @staticmethod
    def enrich_single_query(query: MenteeQuery) -> Dict[str, Any]:
        return ResponseEnricher.enrich_queries([query])[0]

    @staticmethod
    def shared_query_view(query: MenteeQuery) -> Dict[str, Any]:
        """The anonymous, read-only projection served behind a share link"""
        return SharedQueryResponse(
            full_name=query.full_name,
            course_program_year=query.course_program_year,
            university_name=query.university_name,
            email=query.email,
            mentorship_type=query.mentorship_type,
            mentorship_type_label=MENTORSHIP_TYPE_LABELS.get(query.mentorship_type, query.mentorship_type),
            domain_guidance=query.domain_guidance,
            query_description=query.query_description,
            expected_outcome=query.expected_outcome,
            mentorship_duration=query.mentorship_duration,
            duration_label=DURATION_LABELS.get(query.mentorship_duration, query.mentorship_duration),
            why_this_mentor=query.why_this_mentor,
            mentor_name=display_name(query.mentor, None),
            mentor_reply=query.mentor_reply,
            replied_at=query.replied_at,
            created_at=query.created_at,
        ).model_dump()
