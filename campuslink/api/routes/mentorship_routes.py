"""
Mentorship Routes

GET /mentorship/search - Find mentors (query or profile skills)
POST /mentorship/requests - Send a mentor request
GET /mentorship/requests - Get sent and received requests
PUT /mentorship/requests/{request_id} - Accept or decline a received request

All routes require a complete profile.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Query

from campuslink.core.auth import get_profiled_user
from campuslink.services.matching_service import get_matching_service
from campuslink.services.moderation_service import get_moderation_service, ContentRejectedError
from campuslink.services.mongo_service import ProfileService, MentorRequestService, ChatService
from campuslink.schemas.schemas import (
    MentorMatch, MentorSearchResponse, MentorRequestCreate, MentorRequestDecisionBody,
    MentorRequestResponse, MentorRequestListResponse, RequestDecision
)

router = APIRouter(prefix="/mentorship", tags=["Mentorship"])
logger = logging.getLogger(__name__)


def to_request_response(doc: dict) -> MentorRequestResponse:
    return MentorRequestResponse(
        id=doc["id"],
        sender_id=doc["sender_id"],
        receiver_id=doc["receiver_id"],
        message=doc.get("message") or "",
        status=doc.get("status", "pending"),
        chat_id=doc.get("chat_id"),
        created_at=doc["created_at"],
        updated_at=doc.get("updated_at")
    )


@router.get("/search", response_model=MentorSearchResponse)
async def search_mentors(
    q: Optional[str] = Query(None, max_length=200, description="e.g. 'python, photography'"),
    limit: Optional[int] = Query(None, ge=1, le=50),
    min_score: int = Query(0, ge=0, le=100),
    user: dict = Depends(get_profiled_user)
):
    """
    Find mentors.

    Without a query, suggestions are based on your profile's skills to learn.
    Each mentor comes with an AI match score (0-100) and a reason;
    keyword overlap is used when the AI is unavailable.
    """
    result = get_matching_service().search(
        seeker_profile=user["profile"],
        query=q,
        limit=limit,
        min_score=min_score
    )
    mentors = [MentorMatch(**m) for m in result["mentors"]]
    return MentorSearchResponse(
        needs=result["needs"],
        query_source=result["query_source"],
        mentors=mentors,
        total=len(mentors)
    )


@router.post("/requests", response_model=MentorRequestResponse, status_code=201)
async def send_request(data: MentorRequestCreate, user: dict = Depends(get_profiled_user)):
    """Send a mentor request. The intro message is AI-moderated."""
    sender_id = user["user_id"]
    if data.receiver_id == sender_id:
        raise HTTPException(status_code=400, detail="You cannot send a request to yourself")

    if not ProfileService().get_by_user(data.receiver_id):
        raise HTTPException(status_code=404, detail="Mentor not found")

    service = MentorRequestService()
    if service.find_pending(sender_id, data.receiver_id):
        raise HTTPException(status_code=409, detail="You already have a pending request to this mentor")

    message = data.message.strip()
    if message:
        try:
            get_moderation_service().ensure_safe(message, "mentor request")
        except ContentRejectedError as e:
            raise HTTPException(status_code=422, detail=f"Request rejected: {e.reason}")

    request_id = service.insert(sender_id, data.receiver_id, message)
    logger.info("Mentor request %s: %s -> %s", request_id, sender_id, data.receiver_id)

    return to_request_response(service.get_by_id(request_id))


@router.get("/requests", response_model=MentorRequestListResponse)
async def list_requests(user: dict = Depends(get_profiled_user)):
    """Get mentor requests you sent and received, newest first."""
    service = MentorRequestService()
    return MentorRequestListResponse(
        sent=[to_request_response(d) for d in service.list_sent(user["user_id"])],
        received=[to_request_response(d) for d in service.list_received(user["user_id"])]
    )


@router.put("/requests/{request_id}", response_model=MentorRequestResponse)
async def respond_to_request(
    request_id: str,
    body: MentorRequestDecisionBody,
    user: dict = Depends(get_profiled_user)
):
    """
    Accept or decline a received request.
    Accepting opens a chat between the two students.
    """
    service = MentorRequestService()
    doc = service.get_by_id(request_id)
    if not doc or doc["receiver_id"] != user["user_id"]:
        raise HTTPException(status_code=404, detail="Request not found")

    if doc.get("status") != "pending":
        raise HTTPException(status_code=409, detail=f"Request already {doc.get('status')}")

    new_status = "accepted" if body.decision == RequestDecision.accept else "declined"
    if not service.set_status(request_id, new_status):
        raise HTTPException(status_code=409, detail="Request was already answered")

    if new_status == "accepted":
        chat_id = ChatService().create([doc["sender_id"], doc["receiver_id"]], request_id)
        service.attach_chat(request_id, chat_id)

    logger.info("Mentor request %s %s by user %s", request_id, new_status, user["user_id"])
    return to_request_response(service.get_by_id(request_id))
