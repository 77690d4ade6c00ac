"""
Activity Routes

GET /activity - My issues, mentor requests and chats in one payload
"""

from fastapi import APIRouter, Depends

from campuslink.core.auth import get_current_user
from campuslink.services.mongo_service import get_mongo_services, is_profile_complete
from campuslink.api.routes.issue_routes import to_issue_response
from campuslink.api.routes.mentorship_routes import to_request_response
from campuslink.api.routes.chat_routes import to_chat_response
from campuslink.schemas.schemas import ActivityResponse

router = APIRouter(prefix="/activity", tags=["Activity"])


@router.get("", response_model=ActivityResponse)
async def my_activity(user: dict = Depends(get_current_user)):
    """Everything the current user has reported, requested or chatted about."""
    services = get_mongo_services()
    user_id = user["user_id"]

    return ActivityResponse(
        profile_complete=is_profile_complete(services["profiles"].get_by_user(user_id)),
        issues=[to_issue_response(d) for d in services["issues"].list_by_reporter(user_id)],
        sent_requests=[to_request_response(d) for d in services["mentor_requests"].list_sent(user_id)],
        received_requests=[to_request_response(d) for d in services["mentor_requests"].list_received(user_id)],
        chats=[to_chat_response(c) for c in services["chats"].list_for_user(user_id)]
    )
