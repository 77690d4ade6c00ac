"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from campuslink.api.routes.auth_routes import router as auth_router
from campuslink.api.routes.profile_routes import router as profile_router
from campuslink.api.routes.issue_routes import router as issue_router
from campuslink.api.routes.mentorship_routes import router as mentorship_router
from campuslink.api.routes.chat_routes import router as chat_router
from campuslink.api.routes.activity_routes import router as activity_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(profile_router)
api_router.include_router(issue_router)
api_router.include_router(mentorship_router)
api_router.include_router(chat_router)
api_router.include_router(activity_router)
