"""
Field Migration Service

Older clients wrote some documents with different field names:
- mentor_requests: from_user_id / to_user_id   (now sender_id / receiver_id)
- profiles:        skills_offered / skills_wanted (now skills_have / skills_to_learn)

rename_fields() copies old values into the new fields in place. Old fields
are kept by default so older clients keep working; pass keep_old=False
once they are gone.
"""

import logging
from typing import Dict, Optional

from pymongo.collection import Collection

from campuslink.db.mongodb import get_collection, COLLECTIONS

logger = logging.getLogger(__name__)

MIGRATIONS: Dict[str, Dict[str, str]] = {
    "mentor_requests": {
        "from_user_id": "sender_id",
        "to_user_id": "receiver_id"
    },
    "profiles": {
        "skills_offered": "skills_have",
        "skills_wanted": "skills_to_learn"
    }
}


def plan_document(doc: dict, mapping: Dict[str, str], keep_old: bool = True) -> Optional[dict]:
    """
    Work out the update for one document.

    Returns a MongoDB update ({"$set": ..., "$unset": ...}) or None when
    nothing needs to change.
    """
    to_set = {}
    to_unset = {}
    for old, new in mapping.items():
        if old not in doc:
            continue
        if doc.get(new) is None:
            to_set[new] = doc[old]
        if not keep_old:
            to_unset[old] = ""

    update = {}
    if to_set:
        update["$set"] = to_set
    if to_unset:
        update["$unset"] = to_unset
    return update or None


def rename_fields(
    collection: Collection,
    mapping: Dict[str, str],
    keep_old: bool = True,
    dry_run: bool = False
) -> dict:
    """
    Rename fields across a whole collection.

    Each document ends up in exactly one bucket:
    - migrated:   had old fields and got an update
    - skipped:    already carries the new fields (or nothing left to do)
    - unexpected: carries neither old nor new fields

    Returns {"checked", "migrated", "skipped", "unexpected"}.
    """
    report = {"checked": 0, "migrated": 0, "skipped": 0, "unexpected": 0}
    old_fields = set(mapping)
    new_fields = set(mapping.values())

    for doc in collection.find({}):
        report["checked"] += 1
        doc_id = doc["_id"]

        if old_fields.intersection(doc):
            update = plan_document(doc, mapping, keep_old=keep_old)
            if update is None:
                logger.debug("%s %s already has new fields", collection.name, doc_id)
                report["skipped"] += 1
                continue
            if dry_run:
                logger.info("[dry-run] %s %s would get %s", collection.name, doc_id, update)
            else:
                collection.update_one({"_id": doc_id}, update)
                logger.info("%s %s updated with %s", collection.name, doc_id, update)
            report["migrated"] += 1
        elif new_fields.issubset(doc):
            report["skipped"] += 1
        else:
            logger.warning("%s %s has unexpected format: fields=%s", collection.name, doc_id, sorted(doc))
            report["unexpected"] += 1

    logger.info(
        "Migration of %s %s: %s", collection.name, "simulated" if dry_run else "complete", report
    )
    return report


def run_migration(name: str, keep_old: bool = True, dry_run: bool = False) -> dict:
    """Run one of the named MIGRATIONS against its collection."""
    if name not in MIGRATIONS:
        raise KeyError(f"Unknown migration '{name}'. Known: {', '.join(MIGRATIONS)}")
    collection = get_collection(COLLECTIONS[name])
    return rename_fields(collection, MIGRATIONS[name], keep_old=keep_old, dry_run=dry_run)


def diagnose_requests(user_id: int, sample_size: int = 10) -> dict:
    """
    Count a user's mentor requests under both the new and the legacy field
    names, plus a sample of documents showing which fields they carry.
    """
    collection = get_collection(COLLECTIONS["mentor_requests"])
    sample = []
    for doc in collection.find({}).limit(sample_size):
        sample.append({"id": str(doc["_id"]), "fields": sorted(k for k in doc if k != "_id")})

    return {
        "user_id": user_id,
        "sent": {
            "sender_id": collection.count_documents({"sender_id": user_id}),
            "from_user_id": collection.count_documents({"from_user_id": user_id})
        },
        "received": {
            "receiver_id": collection.count_documents({"receiver_id": user_id}),
            "to_user_id": collection.count_documents({"to_user_id": user_id})
        },
        "total_requests": collection.count_documents({}),
        "sample": sample
    }
