"""
CampusLink - Main Application

FastAPI backend with:
- SQL database for accounts
- MongoDB for profiles, issues, mentor requests and chats
- Gemini AI for moderation, issue triage and mentor matching
- JWT authentication (college email domains only)

Run: uvicorn campuslink.main:app --reload
"""

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from campuslink import __version__
from campuslink.api.routes import api_router
from campuslink.core.config import get_settings
from campuslink.core.logging import configure_logging
from campuslink.db.mongodb import init_mongo_indexes
from campuslink.db.postgres import init_postgres_schema
from campuslink.utils.image_upload import UPLOAD_URL_PREFIX

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="CampusLink",
    description="""
    A campus companion for students.

    ## Features
    - **Issues**: Report safety, hygiene, infrastructure or canteen problems, anonymously if you like
    - **Profiles**: Department, year, skills you have and skills you want to learn
    - **Mentorship**: AI-scored mentor suggestions and mentor requests
    - **Chat**: AI-moderated conversations between matched students

    ## Storage
    - SQL: Accounts (email, password hash, role)
    - MongoDB: Documents (profiles, issues, requests, chats, messages)
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    debug=settings.debug
)

# CORS middleware (mobile web client)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")

# Serve issue photos
os.makedirs(settings.upload_dir, exist_ok=True)
app.mount(UPLOAD_URL_PREFIX, StaticFiles(directory=settings.upload_dir), name="uploads")


# Startup event
@app.on_event("startup")
async def startup_event():
    """Create the SQL schema and MongoDB indexes on startup."""
    try:
        init_postgres_schema()
    except Exception as e:
        logger.error("SQL schema initialization failed: %s", e)
    try:
        init_mongo_indexes()
    except Exception as e:
        logger.error("MongoDB index initialization failed: %s", e)


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "CampusLink", "version": __version__}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    from campuslink.db.postgres import test_postgres_connection
    from campuslink.db.mongodb import test_mongo_connection

    return {
        "status": "healthy",
        "sql": "connected" if test_postgres_connection() else "disconnected",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }
