"""
Profile Routes

POST /profiles/me - Create own profile
GET /profiles/me - Get own profile
PUT /profiles/me - Update own profile
GET /profiles/{user_id} - View another student's profile (signed-in users)
"""

import logging

from fastapi import APIRouter, HTTPException, Depends

from campuslink.core.auth import get_current_user
from campuslink.services.mongo_service import (
    ProfileService, is_profile_complete, profile_skills_have, profile_skills_to_learn
)
from campuslink.schemas.schemas import (
    ProfileCreate, ProfileUpdate, ProfileResponse
)

router = APIRouter(prefix="/profiles", tags=["Profiles"])
logger = logging.getLogger(__name__)


def _to_response(doc: dict) -> ProfileResponse:
    return ProfileResponse(
        id=doc["id"],
        user_id=doc["user_id"],
        department=doc.get("department"),
        year=doc.get("year"),
        skills_have=profile_skills_have(doc),
        skills_to_learn=profile_skills_to_learn(doc),
        bio=doc.get("bio", ""),
        profile_complete=is_profile_complete(doc),
        created_at=doc["created_at"],
        updated_at=doc["updated_at"]
    )


@router.post("/me", response_model=ProfileResponse, status_code=201)
async def create_profile(data: ProfileCreate, user: dict = Depends(get_current_user)):
    """
    Create the current user's profile.

    Skills may be sent as lists or comma-separated strings.
    """
    service = ProfileService()
    if service.get_by_user(user["user_id"]):
        raise HTTPException(status_code=409, detail="Profile already exists. Use PUT to update.")

    service.insert(user["user_id"], {
        "department": data.department.value,
        "year": data.year.value,
        "skills_have": data.skills_have,
        "skills_to_learn": data.skills_to_learn,
        "bio": data.bio
    })
    logger.info("Profile created for user %s", user["user_id"])

    return _to_response(service.get_by_user(user["user_id"]))


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(user: dict = Depends(get_current_user)):
    """Get the current user's profile."""
    doc = ProfileService().get_by_user(user["user_id"])
    if not doc:
        raise HTTPException(status_code=404, detail="Profile not found. Create profile first.")
    return _to_response(doc)


@router.put("/me", response_model=ProfileResponse)
async def update_my_profile(data: ProfileUpdate, user: dict = Depends(get_current_user)):
    """Update profile. Only provided fields are updated."""
    updates = {}
    for field in ["department", "year", "skills_have", "skills_to_learn", "bio"]:
        value = getattr(data, field)
        if value is not None:
            updates[field] = value.value if hasattr(value, "value") else value

    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    service = ProfileService()
    if not service.update(user["user_id"], updates):
        raise HTTPException(status_code=404, detail="Profile not found. Create profile first.")

    return _to_response(service.get_by_user(user["user_id"]))


@router.get("/{user_id}", response_model=ProfileResponse)
async def get_profile(user_id: int, user: dict = Depends(get_current_user)):
    """View another student's profile."""
    doc = ProfileService().get_by_user(user_id)
    if not doc:
        raise HTTPException(status_code=404, detail="Profile not found")
    return _to_response(doc)
