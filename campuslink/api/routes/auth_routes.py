"""
Authentication Routes

POST /auth/register - Register with a college email
POST /auth/login - Login and get JWT token
GET /auth/me - Get current user info

Anonymous visitors need no account: they can report issues without a token.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy import text

from campuslink.db.postgres import get_db_session
from campuslink.core.auth import (
    hash_password, verify_password, create_access_token, get_current_user,
    is_college_email, is_admin_email, role_for_email
)
from campuslink.services.mongo_service import ProfileService, is_profile_complete
from campuslink.schemas.schemas import (
    RegisterRequest, LoginRequest, TokenResponse, UserResponse, MessageResponse
)

router = APIRouter(prefix="/auth", tags=["Authentication"])
logger = logging.getLogger(__name__)


def _require_campus_email(email: str):
    if not is_college_email(email) and not is_admin_email(email):
        raise HTTPException(status_code=400, detail="Please use your college email address")


@router.post("/register", response_model=MessageResponse, status_code=201)
async def register(request: RegisterRequest):
    """
    Register a new account. Only college email domains are accepted
    (admin emails are exempt).
    """
    email = request.email.lower()
    _require_campus_email(email)

    with get_db_session() as db:
        result = db.execute(
            text("SELECT user_id FROM users WHERE email = :email"),
            {"email": email}
        )
        if result.fetchone():
            raise HTTPException(status_code=409, detail="Email already registered")

        role = role_for_email(email)
        db.execute(
            text("""
                INSERT INTO users (email, password_hash, role, is_active, email_verified, created_at)
                VALUES (:email, :password_hash, :role, :is_active, :email_verified, :created_at)
            """),
            {
                "email": email,
                "password_hash": hash_password(request.password),
                "role": role,
                "is_active": True,
                "email_verified": False,
                "created_at": datetime.utcnow()
            }
        )

    logger.info("Registered %s as %s", email, role)
    return MessageResponse(message="Registered successfully. Please login.")


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    email = request.email.lower()
    _require_campus_email(email)

    with get_db_session() as db:
        result = db.execute(
            text("SELECT user_id, password_hash, role, is_active FROM users WHERE email = :email"),
            {"email": email}
        )
        user = result.fetchone()

        if not user:
            raise HTTPException(status_code=401, detail="Invalid email or password")

        user_id, password_hash, role, is_active = user

        if not is_active:
            raise HTTPException(status_code=403, detail="Account deactivated")

        if not verify_password(request.password, password_hash):
            raise HTTPException(status_code=401, detail="Invalid email or password")

        # Admin list may have changed since registration
        expected_role = role_for_email(email)
        if role != expected_role:
            db.execute(
                text("UPDATE users SET role = :role WHERE user_id = :id"),
                {"role": expected_role, "id": user_id}
            )
            logger.info("Role of user %s synced to %s", user_id, expected_role)
            role = expected_role

    token = create_access_token(data={"sub": str(user_id), "role": role})

    return TokenResponse(access_token=token, user_id=user_id, role=role)


@router.get("/me", response_model=UserResponse)
async def get_me(user: dict = Depends(get_current_user)):
    """Get current authenticated user's info."""
    with get_db_session() as db:
        result = db.execute(
            text("""
                SELECT user_id, email, role, is_active, email_verified, created_at
                FROM users WHERE user_id = :id
            """),
            {"id": user["user_id"]}
        )
        row = result.fetchone()

    profile = ProfileService().get_by_user(user["user_id"])

    return UserResponse(
        user_id=row[0], email=row[1], role=row[2], is_active=bool(row[3]),
        email_verified=bool(row[4]), created_at=row[5],
        profile_complete=is_profile_complete(profile)
    )
