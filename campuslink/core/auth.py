"""
Authentication Utility - JWT, password handling and sign-up rules.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification
- College email domain and admin email checks
- FastAPI dependencies for protected, optional-auth and admin routes
"""

from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import text

from campuslink.core.config import get_settings
from campuslink.db.postgres import get_db_session
from campuslink.services.mongo_service import ProfileService, is_profile_complete

settings = get_settings()

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractors
bearer_scheme = HTTPBearer()
optional_bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def email_domain(email: str) -> str:
    return email.rsplit("@", 1)[-1].lower()


def is_college_email(email: str) -> bool:
    """Email belongs to an allowed campus domain (or one of its subdomains)."""
    domain = email_domain(email)
    for allowed in settings.allowed_email_domains:
        allowed = allowed.lower().lstrip("@")
        if domain == allowed or domain.endswith("." + allowed):
            return True
    return False


def is_admin_email(email: str) -> bool:
    return email.lower() in {e.lower() for e in settings.admin_emails}


def role_for_email(email: str) -> str:
    return "admin" if is_admin_email(email) else "user"


def _load_user(user_id: int) -> Optional[dict]:
    with get_db_session() as db:
        result = db.execute(
            text("SELECT user_id, email, role, is_active FROM users WHERE user_id = :id"),
            {"id": user_id}
        )
        row = result.fetchone()
    if not row:
        return None
    return {"user_id": row[0], "email": row[1], "role": row[2], "is_active": bool(row[3])}


def _user_from_token(token: str) -> dict:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(token)
    if not payload or not payload.get("sub"):
        raise credentials_exception

    try:
        user = _load_user(int(payload["sub"]))
    except ValueError:
        raise credentials_exception
    if not user:
        raise credentials_exception

    if not user.pop("is_active"):
        raise HTTPException(status_code=403, detail="Account deactivated")

    return user


async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme)) -> dict:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @app.get("/protected")
        async def route(user: dict = Depends(get_current_user)):
            return user
    """
    return _user_from_token(credentials.credentials)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_bearer_scheme)
) -> Optional[dict]:
    """Dependency - Current user, or None for anonymous callers."""
    if credentials is None:
        return None
    return _user_from_token(credentials.credentials)


async def get_current_admin(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require admin role."""
    if user["role"] != "admin":
        raise HTTPException(status_code=403, detail="Admins only")
    return user


async def get_profiled_user(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require a complete profile and attach it as user["profile"]."""
    profile = ProfileService().get_by_user(user["user_id"])
    if not is_profile_complete(profile):
        raise HTTPException(status_code=403, detail="Complete your profile to unlock mentorship features")

    user["profile"] = profile
    return user
