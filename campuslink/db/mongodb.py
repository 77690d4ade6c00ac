"""
MongoDB Connection Utility

MongoDB stores:
- Student profiles (department, year, skills, bio)
- Issue reports and their AI triage
- Mentor requests
- Chats and chat messages

WHY MongoDB for these?
- Schema-flexible: profiles and requests evolved field names over time
- Document-oriented: each record is self-contained
- AI outputs (triage, moderation) are stored as nested JSON
"""
import logging

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

from campuslink.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri)
    return _client


def get_mongo_db() -> Database:
    """Get the campuslink_docs database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    """Get a specific collection by name (see COLLECTIONS)."""
    db = get_mongo_db()
    return db[name]


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        client.admin.command('ping')
        return True
    except Exception as e:
        logger.error("MongoDB connection failed: %s", e)
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "profiles": "profiles",
    "issues": "issues",
    "mentor_requests": "mentor_requests",
    "chats": "chats",
    "messages": "messages"
}


def init_mongo_indexes():
    """
    Create indexes for better query performance.
    Call this once during app startup.
    """
    db = get_mongo_db()

    # One profile per user
    db[COLLECTIONS["profiles"]].create_index("user_id", unique=True)

    db[COLLECTIONS["issues"]].create_index([("reporter_id", ASCENDING), ("created_at", DESCENDING)])
    db[COLLECTIONS["issues"]].create_index([("status", ASCENDING), ("category", ASCENDING)])

    db[COLLECTIONS["mentor_requests"]].create_index("sender_id")
    db[COLLECTIONS["mentor_requests"]].create_index("receiver_id")

    db[COLLECTIONS["chats"]].create_index("participants")
    db[COLLECTIONS["messages"]].create_index([("chat_id", ASCENDING), ("created_at", ASCENDING)])

    logger.info("MongoDB indexes created successfully")
