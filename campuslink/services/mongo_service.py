"""
MongoDB Service - CRUD operations for document collections.

Collections in this database:
1. profiles         - Student profile (department, year, skills, bio)
2. issues           - Campus issue reports with AI triage
3. mentor_requests  - Requests from a learner to a mentor
4. chats            - Conversations opened by accepted requests
5. messages         - Chat messages

Older documents may still carry legacy field names
(from_user_id/to_user_id, skills_offered/skills_wanted). Readers here
accept both; scripts/migrate_fields.py rewrites them.
"""

from datetime import datetime
from typing import Optional, List

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING
from pymongo.collection import Collection

from campuslink.db.mongodb import get_collection, COLLECTIONS


# ============================================================
# HELPERS
# ============================================================

def to_object_id(value: str) -> Optional[ObjectId]:
    """Parse a client-supplied id. Returns None for malformed ids."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def serialize_doc(doc: dict) -> Optional[dict]:
    """Convert MongoDB document to JSON-serializable dict (`_id` -> `id`)."""
    if doc is None:
        return None
    if "_id" in doc:
        doc["id"] = str(doc.pop("_id"))
    return doc


def serialize_docs(docs) -> list:
    """Convert an iterable of MongoDB documents to a JSON-serializable list."""
    return [serialize_doc(doc) for doc in docs]


def normalize_request(doc: Optional[dict]) -> Optional[dict]:
    """Fill sender_id/receiver_id from legacy field names when missing."""
    if doc is None:
        return None
    if doc.get("sender_id") is None and doc.get("from_user_id") is not None:
        doc["sender_id"] = doc["from_user_id"]
    if doc.get("receiver_id") is None and doc.get("to_user_id") is not None:
        doc["receiver_id"] = doc["to_user_id"]
    return doc


def profile_skills_have(profile: Optional[dict]) -> List[str]:
    if not profile:
        return []
    return profile.get("skills_have") or profile.get("skills_offered") or []


def profile_skills_to_learn(profile: Optional[dict]) -> List[str]:
    if not profile:
        return []
    return profile.get("skills_to_learn") or profile.get("skills_wanted") or []


def is_profile_complete(profile: Optional[dict]) -> bool:
    """A profile unlocks mentorship once every required field is filled."""
    if not profile:
        return False
    return bool(
        profile.get("department")
        and profile.get("year")
        and profile_skills_have(profile)
        and profile_skills_to_learn(profile)
    )


# ============================================================
# PROFILES COLLECTION
# ============================================================

class ProfileService:
    """
    Handles student profile storage. One document per user.
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["profiles"])

    def insert(self, user_id: int, profile_data: dict) -> str:
        """
        Insert a profile.

        Example profile_data:
        {
            "department": "Computer Science",
            "year": "2nd Year",
            "skills_have": ["Python", "Guitar"],
            "skills_to_learn": ["Photography"],
            "bio": "Night owl, coffee person."
        }
        """
        now = datetime.utcnow()
        doc = {
            "user_id": user_id,
            **profile_data,
            "created_at": now,
            "updated_at": now
        }
        result = self.collection.insert_one(doc)
        return str(result.inserted_id)

    def get_by_user(self, user_id: int) -> Optional[dict]:
        doc = self.collection.find_one({"user_id": user_id})
        return serialize_doc(doc)

    def update(self, user_id: int, fields: dict) -> bool:
        result = self.collection.update_one(
            {"user_id": user_id},
            {"$set": {**fields, "updated_at": datetime.utcnow()}}
        )
        return result.matched_count > 0

    def list_mentor_candidates(self, exclude_user_id: int) -> List[dict]:
        """All other profiles that offer at least one skill."""
        cursor = self.collection.find({
            "user_id": {"$ne": exclude_user_id},
            "$or": [
                {"skills_have": {"$exists": True, "$ne": []}},
                {"skills_offered": {"$exists": True, "$ne": []}}
            ]
        })
        return serialize_docs(cursor)


# ============================================================
# ISSUES COLLECTION
# ============================================================

class IssueService:
    """
    Handles campus issue reports.
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["issues"])

    def insert(
        self,
        reporter_id: Optional[int],
        category: str,
        description: str,
        is_anonymous: bool,
        image_url: Optional[str] = None,
        triage: Optional[dict] = None
    ) -> str:
        """
        Insert an issue report.

        reporter_id is None for anonymous sessions. For signed-in users who
        chose anonymity it is kept so the report shows up in their activity,
        but it is never returned to admins.
        """
        now = datetime.utcnow()
        doc = {
            "reporter_id": reporter_id,
            "category": category,
            "description": description,
            "is_anonymous": is_anonymous,
            "image_url": image_url,
            "triage": triage or {},
            "status": "open",
            "status_history": [],
            "created_at": now,
            "updated_at": now
        }
        result = self.collection.insert_one(doc)
        return str(result.inserted_id)

    def get_by_id(self, issue_id: str) -> Optional[dict]:
        oid = to_object_id(issue_id)
        if oid is None:
            return None
        return serialize_doc(self.collection.find_one({"_id": oid}))

    def list_by_reporter(self, reporter_id: int) -> List[dict]:
        cursor = self.collection.find(
            {"reporter_id": reporter_id}
        ).sort("created_at", DESCENDING)
        return serialize_docs(cursor)

    def list_all(
        self,
        status: Optional[str] = None,
        category: Optional[str] = None,
        limit: int = 50,
        skip: int = 0
    ) -> List[dict]:
        cursor = self.collection.find(
            self._filter(status, category)
        ).sort("created_at", DESCENDING).skip(skip).limit(limit)
        return serialize_docs(cursor)

    def count(self, status: Optional[str] = None, category: Optional[str] = None) -> int:
        return self.collection.count_documents(self._filter(status, category))

    @staticmethod
    def _filter(status: Optional[str], category: Optional[str]) -> dict:
        query = {}
        if status:
            query["status"] = status
        if category:
            query["category"] = category
        return query

    def update_status(self, issue_id: str, status: str, admin_id: int, note: str = None) -> bool:
        oid = to_object_id(issue_id)
        if oid is None:
            return False
        now = datetime.utcnow()
        result = self.collection.update_one(
            {"_id": oid},
            {
                "$set": {"status": status, "updated_at": now},
                "$push": {"status_history": {
                    "status": status, "admin_id": admin_id, "note": note, "at": now
                }}
            }
        )
        return result.matched_count > 0


# ============================================================
# MENTOR REQUESTS COLLECTION
# ============================================================

class MentorRequestService:
    """
    Handles mentor requests (learner -> mentor).
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["mentor_requests"])

    def insert(self, sender_id: int, receiver_id: int, message: str) -> str:
        now = datetime.utcnow()
        doc = {
            "sender_id": sender_id,
            "receiver_id": receiver_id,
            "message": message,
            "status": "pending",
            "chat_id": None,
            "created_at": now,
            "updated_at": now
        }
        result = self.collection.insert_one(doc)
        return str(result.inserted_id)

    def get_by_id(self, request_id: str) -> Optional[dict]:
        oid = to_object_id(request_id)
        if oid is None:
            return None
        return normalize_request(serialize_doc(self.collection.find_one({"_id": oid})))

    def find_pending(self, sender_id: int, receiver_id: int) -> Optional[dict]:
        """Pending request between the two users, in either direction."""
        doc = self.collection.find_one({
            "status": "pending",
            "$or": [
                {"sender_id": sender_id, "receiver_id": receiver_id},
                {"sender_id": receiver_id, "receiver_id": sender_id},
                {"from_user_id": sender_id, "to_user_id": receiver_id},
                {"from_user_id": receiver_id, "to_user_id": sender_id}
            ]
        })
        return normalize_request(serialize_doc(doc))

    def list_sent(self, user_id: int) -> List[dict]:
        cursor = self.collection.find(
            {"$or": [{"sender_id": user_id}, {"from_user_id": user_id}]}
        ).sort("created_at", DESCENDING)
        return [normalize_request(doc) for doc in serialize_docs(cursor)]

    def list_received(self, user_id: int) -> List[dict]:
        cursor = self.collection.find(
            {"$or": [{"receiver_id": user_id}, {"to_user_id": user_id}]}
        ).sort("created_at", DESCENDING)
        return [normalize_request(doc) for doc in serialize_docs(cursor)]

    def set_status(self, request_id: str, status: str) -> bool:
        """Move a pending request to accepted/declined. False if it was no longer pending."""
        oid = to_object_id(request_id)
        if oid is None:
            return False
        result = self.collection.update_one(
            {"_id": oid, "status": "pending"},
            {"$set": {"status": status, "updated_at": datetime.utcnow()}}
        )
        return result.modified_count > 0

    def attach_chat(self, request_id: str, chat_id: str) -> None:
        self.collection.update_one({"_id": ObjectId(request_id)}, {"$set": {"chat_id": chat_id}})


# ============================================================
# CHATS COLLECTION
# ============================================================

class ChatService:
    """
    Handles chats between a mentor and a learner.
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["chats"])

    def create(self, participants: List[int], request_id: str) -> str:
        now = datetime.utcnow()
        doc = {
            "participants": sorted(participants),
            "request_id": request_id,
            "last_message": None,
            "last_message_at": None,
            "created_at": now
        }
        result = self.collection.insert_one(doc)
        return str(result.inserted_id)

    def get_by_id(self, chat_id: str) -> Optional[dict]:
        oid = to_object_id(chat_id)
        if oid is None:
            return None
        return serialize_doc(self.collection.find_one({"_id": oid}))

    def list_for_user(self, user_id: int) -> List[dict]:
        cursor = self.collection.find({"participants": user_id}).sort("created_at", DESCENDING)
        chats = serialize_docs(cursor)
        # Most recently active first; chats without messages keep creation order
        chats.sort(key=lambda c: c.get("last_message_at") or c["created_at"], reverse=True)
        return chats

    def touch(self, chat_id: str, preview: str, at: datetime) -> None:
        self.collection.update_one(
            {"_id": ObjectId(chat_id)},
            {"$set": {"last_message": preview[:80], "last_message_at": at}}
        )


# ============================================================
# MESSAGES COLLECTION
# ============================================================

class MessageService:
    """
    Handles chat messages.
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["messages"])

    def insert(self, chat_id: str, sender_id: int, text: str) -> dict:
        doc = {
            "chat_id": chat_id,
            "sender_id": sender_id,
            "text": text,
            "created_at": datetime.utcnow()
        }
        self.collection.insert_one(doc)
        return serialize_doc(doc)

    def list_for_chat(self, chat_id: str, limit: int = 200) -> List[dict]:
        """The latest `limit` messages, oldest first."""
        cursor = self.collection.find({"chat_id": chat_id}).sort(
            [("created_at", DESCENDING), ("_id", DESCENDING)]
        ).limit(limit)
        messages = serialize_docs(cursor)
        messages.reverse()
        return messages


# ============================================================
# CONVENIENCE FUNCTION: Get all services
# ============================================================

def get_mongo_services() -> dict:
    """
    Get all MongoDB service instances.

    Usage:
        services = get_mongo_services()
        services['issues'].insert(...)
    """
    return {
        "profiles": ProfileService(),
        "issues": IssueService(),
        "mentor_requests": MentorRequestService(),
        "chats": ChatService(),
        "messages": MessageService()
    }
