"""
Issue Routes

POST /issues - Report a campus issue (anonymous or signed in, optional image)
GET /issues/categories - Get issue categories
GET /issues/mine - Get my reported issues
GET /issues - List all issues (admin only)
GET /issues/{issue_id} - Get one issue (admin or reporter)
PUT /issues/{issue_id}/status - Update issue status (admin only)
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, File, Form, Query, UploadFile

from campuslink.core.auth import get_current_user, get_optional_user, get_current_admin
from campuslink.services.mongo_service import IssueService
from campuslink.services.moderation_service import (
    get_moderation_service, get_triage_service, ContentRejectedError, ISSUE_CATEGORIES
)
from campuslink.utils.image_upload import save_issue_image
from campuslink.schemas.schemas import (
    IssueCategory, IssueStatus, IssueResponse, IssueListResponse, IssueStatusUpdate,
    MessageResponse, DESCRIPTION_MAX_LENGTH
)

router = APIRouter(prefix="/issues", tags=["Issues"])
logger = logging.getLogger(__name__)


def to_issue_response(doc: dict) -> IssueResponse:
    """Anonymous reports never expose who filed them."""
    reporter_id = None if doc.get("is_anonymous") else doc.get("reporter_id")
    return IssueResponse(
        id=doc["id"],
        category=doc["category"],
        description=doc["description"],
        is_anonymous=doc.get("is_anonymous", False),
        image_url=doc.get("image_url"),
        status=doc.get("status", "open"),
        triage=doc.get("triage") or None,
        reporter_id=reporter_id,
        created_at=doc["created_at"],
        updated_at=doc["updated_at"]
    )


@router.post("", response_model=IssueResponse, status_code=201)
async def report_issue(
    category: IssueCategory = Form(...),
    description: str = Form(..., max_length=DESCRIPTION_MAX_LENGTH),
    is_anonymous: bool = Form(False),
    image: Optional[UploadFile] = File(None, description="Optional photo (max 5MB)"),
    user: Optional[dict] = Depends(get_optional_user)
):
    """
    Report a campus issue.

    Process:
    1. Validate description and optional image
    2. AI moderation (unsafe reports are rejected)
    3. AI triage: suggested category, priority, tags, summary
    4. Store in MongoDB

    Callers without a token are always anonymous.
    """
    description = description.strip()
    if not description:
        raise HTTPException(status_code=400, detail="Description is required")

    try:
        get_moderation_service().ensure_safe(description, "issue report")
    except ContentRejectedError as e:
        raise HTTPException(status_code=422, detail=f"Report rejected: {e.reason}")

    image_url = await save_issue_image(image)
    triage = get_triage_service().categorize(description)

    reporter_id = user["user_id"] if user else None
    anonymous = is_anonymous or user is None

    service = IssueService()
    issue_id = service.insert(
        reporter_id=reporter_id,
        category=category.value,
        description=description,
        is_anonymous=anonymous,
        image_url=image_url,
        triage=triage
    )
    logger.info(
        "Issue %s reported (%s, priority %s, anonymous=%s)",
        issue_id, category.value, triage["priority"], anonymous
    )

    return to_issue_response(service.get_by_id(issue_id))


@router.get("/categories")
async def issue_categories():
    """Get the issue categories a report can be filed under."""
    return {"categories": ISSUE_CATEGORIES}


@router.get("/mine", response_model=IssueListResponse)
async def my_issues(user: dict = Depends(get_current_user)):
    """Get issues reported by the current user, newest first."""
    docs = IssueService().list_by_reporter(user["user_id"])
    issues = [to_issue_response(d) for d in docs]
    return IssueListResponse(issues=issues, total=len(issues))


@router.get("", response_model=IssueListResponse)
async def list_issues(
    status: Optional[IssueStatus] = Query(None),
    category: Optional[IssueCategory] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    admin: dict = Depends(get_current_admin)
):
    """List all reported issues with filters (admin only)."""
    service = IssueService()
    status_value = status.value if status else None
    category_value = category.value if category else None
    docs = service.list_all(
        status=status_value,
        category=category_value,
        limit=page_size,
        skip=(page - 1) * page_size
    )
    issues = [to_issue_response(d) for d in docs]
    return IssueListResponse(issues=issues, total=service.count(status_value, category_value))


@router.get("/{issue_id}", response_model=IssueResponse)
async def get_issue(issue_id: str, user: dict = Depends(get_current_user)):
    """Get one issue. Visible to admins and to the reporter."""
    doc = IssueService().get_by_id(issue_id)
    if not doc:
        raise HTTPException(status_code=404, detail="Issue not found")
    if user["role"] != "admin" and doc.get("reporter_id") != user["user_id"]:
        raise HTTPException(status_code=404, detail="Issue not found")
    return to_issue_response(doc)


@router.put("/{issue_id}/status", response_model=MessageResponse)
async def update_issue_status(
    issue_id: str,
    data: IssueStatusUpdate,
    admin: dict = Depends(get_current_admin)
):
    """Update an issue's status (admin only)."""
    if not IssueService().update_status(issue_id, data.status.value, admin["user_id"], data.note):
        raise HTTPException(status_code=404, detail="Issue not found")

    logger.info("Issue %s set to %s by admin %s", issue_id, data.status.value, admin["user_id"])
    return MessageResponse(message=f"Issue marked as {data.status.value}")
